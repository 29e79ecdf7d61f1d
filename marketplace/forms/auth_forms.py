# marketplace/forms/auth_forms.py

# Flask-WTF + WTForms : fournit validation et protection CSRF (via SECRET_KEY).
# Les cases à cocher (types de produits, contrats) sont des SelectMultipleField :
# form.field.data est toujours une liste, validée une fois ici.

from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileAllowed
from wtforms import (
    StringField, PasswordField, SubmitField, SelectField, SelectMultipleField,
    IntegerField, TextAreaField,
)
from wtforms.validators import DataRequired, Email, Length, EqualTo, NumberRange, Optional
from wtforms.widgets import ListWidget, CheckboxInput

from marketplace.models.closer import (
    PROFILE_TYPES, MARKETS, AVAILABILITIES, MISSION_TYPES, PRODUCT_TYPES, CONTRACT_TYPES, choices,
)

PHOTO_EXTENSIONS = ["jpg", "jpeg", "png", "webp"]


class MultiCheckboxField(SelectMultipleField):
    widget = ListWidget(prefix_label=False)
    option_widget = CheckboxInput()


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Mot de passe", validators=[DataRequired()])
    submit = SubmitField("Se connecter")


class RegisterCompanyForm(FlaskForm):
    company_name = StringField("Nom de l'entreprise", validators=[DataRequired(), Length(min=2, max=80)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Mot de passe", validators=[DataRequired(), Length(min=6)])
    confirm = PasswordField(
        "Confirmer le mot de passe",
        validators=[DataRequired(), EqualTo("password", message="Les mots de passe ne correspondent pas.")]
    )
    submit = SubmitField("Créer mon compte entreprise")


class CloserProfileForm(FlaskForm):
    """Champs de profil communs à l'inscription et à la mise à jour."""
    first_name = StringField("Prénom", validators=[DataRequired(), Length(max=50)])
    last_name = StringField("Nom", validators=[Optional(), Length(max=50)])
    phone = StringField("Téléphone", validators=[Optional(), Length(max=30)])
    photo = FileField("Photo", validators=[FileAllowed(PHOTO_EXTENSIONS, "Images uniquement.")])

    profile_type = SelectField("Profil", choices=choices(PROFILE_TYPES))
    market = SelectField("Marché", choices=choices(MARKETS))
    availability = SelectField("Disponibilité", choices=choices(AVAILABILITIES))

    years_experience = IntegerField("Années d'expérience", validators=[Optional(), NumberRange(min=0)])
    total_closed = IntegerField("Montant total closé (€)", validators=[Optional(), NumberRange(min=0)])
    product_types = MultiCheckboxField("Types de produits", choices=choices(PRODUCT_TYPES))
    past_clients = TextAreaField("Anciens clients", validators=[Optional(), Length(max=2000)])

    contract_types = MultiCheckboxField("Types de contrat", choices=choices(CONTRACT_TYPES))
    desired_income = StringField("Rémunération souhaitée", validators=[Optional(), Length(max=100)])
    mission_type = SelectField("Type de mission", choices=choices(MISSION_TYPES))

    vision = TextAreaField("Vision", validators=[Optional(), Length(max=2000)])
    submit = SubmitField("Enregistrer")

    def profile_data(self) -> dict:
        """Les valeurs du profil, prêtes pour accounts.register_closer / update_closer_profile."""
        return {
            "first_name": (self.first_name.data or "").strip(),
            "last_name": (self.last_name.data or "").strip(),
            "phone": (self.phone.data or "").strip(),
            "profile_type": self.profile_type.data,
            "market": self.market.data,
            "availability": self.availability.data,
            "years_experience": self.years_experience.data or 0,
            "total_closed": self.total_closed.data or 0,
            "product_types": list(dict.fromkeys(self.product_types.data or [])),
            "past_clients": (self.past_clients.data or "").strip(),
            "contract_types": list(dict.fromkeys(self.contract_types.data or [])),
            "desired_income": (self.desired_income.data or "").strip(),
            "mission_type": self.mission_type.data,
            "vision": (self.vision.data or "").strip(),
        }


class RegisterCloserForm(CloserProfileForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Mot de passe", validators=[DataRequired(), Length(min=6)])
    confirm = PasswordField(
        "Confirmer le mot de passe",
        validators=[DataRequired(), EqualTo("password", message="Les mots de passe ne correspondent pas.")]
    )
    submit = SubmitField("Créer mon profil closeur")
