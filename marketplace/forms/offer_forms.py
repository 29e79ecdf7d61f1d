# marketplace/forms/offer_forms.py

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, SelectField, SubmitField
from wtforms.validators import DataRequired, Length, Optional

from marketplace.models.closer import MISSION_TYPES, choices


class OfferForm(FlaskForm):
    title = StringField("Titre", validators=[DataRequired(), Length(max=120)])
    description = TextAreaField("Description", validators=[DataRequired(), Length(max=5000)])
    remuneration = StringField("Rémunération", validators=[Optional(), Length(max=120)])  # ex: "20% sur CA"
    niche = StringField("Niche", validators=[Optional(), Length(max=120)])
    mission_type = SelectField("Type de mission", choices=choices(MISSION_TYPES), default="LongTerm")
    submit = SubmitField("Publier l'offre")
