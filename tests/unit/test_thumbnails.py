import base64
import io
from pathlib import Path

from PIL import Image

from sharemedia.domains.media.thumbnails import ThumbnailGenerator, VideoInfo, thumbnail_name
from sharemedia.errors import ThumbnailError


def test_thumbnail_name_strips_double_padding():
    assert thumbnail_name(Path("/videos/v.ts")) == "di50cw.jpg"


def test_thumbnail_name_keeps_single_padding():
    expected = base64.b64encode(b"clip.mp4").decode()
    assert expected.endswith("=") and not expected.endswith("==")
    assert thumbnail_name(Path("/somewhere/clip.mp4")) == expected + ".jpg"


def test_thumbnail_name_uses_utf8_bytes():
    name = thumbnail_name(Path("vidéo.mov"))
    assert name == base64.b64encode("vidéo.mov".encode("utf-8")).decode().replace("==", "") + ".jpg"


def test_generate_writes_thumbnail_then_reuses_it(tmp_path, settings, monkeypatch):
    generator = ThumbnailGenerator(settings)
    source = tmp_path / "clip.mp4"
    source.write_bytes(b"fake video")
    durations = iter([1500, 2750])
    frames = []

    def fake_frame(path):
        frames.append(path)
        return Image.new("RGB", (360, 200), (10, 20, 30))

    monkeypatch.setattr(generator, "probe_duration_ms", lambda path: next(durations))
    monkeypatch.setattr(generator, "extract_frame", fake_frame)

    first = generator.generate(source, tmp_path)
    second = generator.generate(source, tmp_path)

    assert first == VideoInfo(thumbnail_path=tmp_path / thumbnail_name(source), duration_ms=1500)
    assert second.thumbnail_path == first.thumbnail_path
    assert second.duration_ms == 2750
    assert len(frames) == 1
    with Image.open(first.thumbnail_path) as img:
        assert img.format == "JPEG"


def test_generate_returns_none_when_extraction_fails(tmp_path, settings, monkeypatch):
    generator = ThumbnailGenerator(settings)

    def broken_frame(path):
        raise ThumbnailError("no video stream")

    monkeypatch.setattr(generator, "probe_duration_ms", lambda path: 1000)
    monkeypatch.setattr(generator, "extract_frame", broken_frame)

    assert generator.generate(tmp_path / "clip.mp4", tmp_path) is None
    assert not (tmp_path / thumbnail_name(Path("clip.mp4"))).exists()


def test_generate_without_ffprobe_returns_none(tmp_path, settings):
    configured = settings.model_copy(update={"ffprobe_bin": "sharemedia-missing-ffprobe"})
    source = tmp_path / "clip.mp4"
    source.write_bytes(b"fake video")

    assert ThumbnailGenerator(configured).generate(source, tmp_path) is None


def test_extract_frame_fits_bounding_box(tmp_path, settings, monkeypatch):
    generator = ThumbnailGenerator(settings)
    frame = Image.new("RGB", (1920, 1080))
    buffer = io.BytesIO()
    frame.save(buffer, "PNG")
    monkeypatch.setattr(generator, "_binary", lambda name: name)
    monkeypatch.setattr(generator, "_run", lambda args: buffer.getvalue())

    result = generator.extract_frame(tmp_path / "clip.mp4")

    assert max(result.size) == 360
    assert result.size[1] in (202, 203)


def test_probe_duration_rounds_to_milliseconds(tmp_path, settings, monkeypatch):
    generator = ThumbnailGenerator(settings)
    monkeypatch.setattr(generator, "_binary", lambda name: name)
    monkeypatch.setattr(generator, "_run", lambda args: b"12.3456\n")

    assert generator.probe_duration_ms(tmp_path / "clip.mp4") == 12346
