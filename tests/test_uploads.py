# tests/test_uploads.py
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from partner_kyc.errors import UploadRejectedError
from partner_kyc.uploads import save_upload, validate_upload
from partner_kyc.utils import MAX_UPLOAD_BYTES


def test_validate_upload_limits() -> None:
    """Tests size and type checks on incoming documents."""
    # --- Passing Cases ---
    validate_upload('application/pdf', 1024)
    validate_upload('image/png', MAX_UPLOAD_BYTES)  # exactly at the limit

    # --- Failing Cases ---
    with pytest.raises(UploadRejectedError, match="5MB"):
        validate_upload('image/jpeg', MAX_UPLOAD_BYTES + 1)
    with pytest.raises(UploadRejectedError, match="PDF, JPEG, or PNG"):
        validate_upload('text/plain', 10)

def test_save_upload_writes_file(tmp_path: Path) -> None:
    reference = save_upload('gst.pdf', 'application/pdf', b'%PDF-1.4 test', tmp_path)

    assert reference.endswith('_gst.pdf')
    assert (tmp_path / reference).read_bytes() == b'%PDF-1.4 test'

def test_save_upload_references_are_unique(tmp_path: Path) -> None:
    first = save_upload('pan.png', 'image/png', b'a', tmp_path)
    second = save_upload('pan.png', 'image/png', b'b', tmp_path)
    assert first != second, "Two uploads of the same name must not overwrite each other"

def test_save_upload_sanitizes_names(tmp_path: Path) -> None:
    reference = save_upload('../../etc/GST cert (1).pdf', 'application/pdf', b'x', tmp_path)

    assert '/' not in reference and ' ' not in reference and '(' not in reference
    assert (tmp_path / reference).parent == tmp_path, "Files must stay inside the upload directory"

def test_rejected_upload_is_not_written(tmp_path: Path) -> None:
    with pytest.raises(UploadRejectedError):
        save_upload('notes.txt', 'text/plain', b'hello', tmp_path / 'uploads')
    assert not (tmp_path / 'uploads').exists()
