# marketplace/uploads.py
# Stockage des photos de profil. On ne garde en base que l'URL renvoyée,
# jamais les octets du fichier.

import os
import uuid
from flask import current_app
from werkzeug.utils import secure_filename


def upload_folder() -> str:
    return current_app.config.get("UPLOAD_FOLDER") or os.path.join(current_app.static_folder, "uploads")


def save_upload(file_storage, field_name: str):
    """
    Enregistre le fichier et renvoie une URL stable (/static/uploads/...),
    ou None si aucun fichier n'a été envoyé.
    """
    if file_storage is None or not getattr(file_storage, "filename", ""):
        return None
    folder = upload_folder()
    os.makedirs(folder, exist_ok=True)

    name = secure_filename(file_storage.filename) or "fichier"
    stored = f"{field_name}-{uuid.uuid4().hex}-{name}"
    file_storage.save(os.path.join(folder, stored))
    return f"/static/uploads/{stored}"
