import os
import logging
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class UploadRejected(ValueError):
    pass


def allowed_file(filename, allowed_extensions):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in allowed_extensions


def validate_upload(file_name, size, config):
    """Check a student upload against the configured type and size limits.

    Returns the sanitized file name.
    """
    if not file_name:
        raise UploadRejected("Assignment file is required")

    filename = secure_filename(file_name)
    if not filename or not allowed_file(filename, config["ALLOWED_EXTENSIONS"]):
        allowed = ", ".join(sorted(ext.upper() for ext in config["ALLOWED_EXTENSIONS"]))
        raise UploadRejected(f"Invalid file type. Allowed types: {allowed}")

    max_bytes = config["MAX_UPLOAD_BYTES"]
    if size is not None and size > max_bytes:
        raise UploadRejected(f"File size must be less than {max_bytes // (1024 * 1024)}MB")

    return filename


def build_file_url(assignment_id, student_id, filename, timestamp):
    base, ext = os.path.splitext(filename)
    return f"/uploads/assignments/{assignment_id}/{student_id}_{timestamp:%Y%m%d%H%M%S}_{base}{ext}"


def file_size(file):
    stream = file.stream
    position = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(position)
    return size


def upload_path(upload_folder, file_url):
    """Map a public ``/uploads/...`` URL to its location under ``upload_folder``."""
    relative = file_url.lstrip("/").split("/", 1)[1]
    return os.path.join(upload_folder, relative)


def store_upload(file, upload_folder, file_url):
    path = upload_path(upload_folder, file_url)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    file.save(path)
    return path


def remove_upload(upload_folder, file_url):
    path = upload_path(upload_folder, file_url)
    try:
        if os.path.exists(path):
            os.remove(path)
            return True
    except OSError:
        logger.exception("Could not remove upload %s", path)
    return False
