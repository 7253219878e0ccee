import pytest

from dllist.compression import IdentityCompressor, Lz10Compressor, decompress_lz10
from dllist.constants import Language, REGIONS
from dllist.packing.errors import CollaboratorError, E_WRITE_IO
from dllist.storage import FileStorage


def test_lz10_roundtrip():
    data = b"Download list " * 200 + bytes(range(256))
    packed = Lz10Compressor().compress(data)
    assert packed[0] == 0x10
    assert int.from_bytes(packed[1:4], "little") == len(data)
    assert len(packed) < len(data)
    assert decompress_lz10(packed) == data


def test_identity_compressor():
    c = IdentityCompressor()
    assert c.compress(b"abc") == b"abc"
    assert c.decompress(b"abc") == b"abc"


def test_storage_layout(tmp_path):
    storage = FileStorage(tmp_path / "lists")
    path = storage.write(REGIONS[1], Language.SPANISH, b"payload")
    assert path == tmp_path / "lists" / "1" / "4" / "dllist.bin"
    assert path.read_bytes() == b"payload"
    storage.write(REGIONS[1], Language.SPANISH, b"second")
    assert path.read_bytes() == b"second"
    assert [p.name for p in path.parent.iterdir()] == ["dllist.bin"]


def test_storage_write_failure(tmp_path):
    blocker = tmp_path / "lists"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(CollaboratorError) as ei:
        FileStorage(blocker).write(REGIONS[0], Language.JAPANESE, b"x")
    assert ei.value.code == E_WRITE_IO
