from PIL import Image

from sharemedia.domains.media.artifacts import copy_file, write_bytes, write_image


def test_write_bytes_replaces_previous_file(tmp_path):
    destination = tmp_path / "artifact.bin"
    destination.write_bytes(b"stale content from an earlier run")

    assert write_bytes(b"new", destination)
    assert destination.read_bytes() == b"new"


def test_write_bytes_reports_failure(tmp_path):
    destination = tmp_path / "missing-dir" / "artifact.bin"

    assert write_bytes(b"data", destination) is False
    assert not destination.exists()


def test_copy_file_replaces_previous_file(tmp_path):
    source = tmp_path / "source.txt"
    source.write_text("fresh")
    destination = tmp_path / "shared.txt"
    destination.write_text("old and much longer content")

    assert copy_file(source, destination)
    assert destination.read_text() == "fresh"


def test_copy_file_reports_missing_source(tmp_path):
    assert copy_file(tmp_path / "nope.txt", tmp_path / "out.txt") is False


def test_write_image_encodes_png(tmp_path):
    destination = tmp_path / "image.png"
    destination.write_bytes(b"not an image")

    assert write_image(Image.new("RGBA", (4, 3), (255, 0, 0, 128)), destination, "PNG")
    with Image.open(destination) as img:
        assert img.format == "PNG"
        assert img.size == (4, 3)


def test_write_image_converts_alpha_for_jpeg(tmp_path):
    destination = tmp_path / "thumb.jpg"

    assert write_image(Image.new("RGBA", (8, 8)), destination, "JPEG")
    with Image.open(destination) as img:
        assert img.format == "JPEG"


def test_copy_file_onto_itself_keeps_the_file(tmp_path):
    path = tmp_path / "clip.pdf"
    path.write_bytes(b"original")

    assert copy_file(path, tmp_path / "." / "clip.pdf")
    assert path.read_bytes() == b"original"
