"""Tests for the speech, camera and object-model capabilities using fakes."""

from __future__ import annotations

import asyncio
import time
from types import SimpleNamespace

import numpy as np
import pytest

from config.settings import CameraSettings, ModelSettings, VoiceSettings
from core.errors import FrameUnavailable, ModelLoadFailure
from hardware.camera import CameraFrameSource
from hardware.object_model import YoloObjectModel
from interaction.voice import NullVoice, Pyttsx3Voice, resolve_voice


class _FakeEngine:
    def __init__(self, voices: list[object] | None = None) -> None:
        self.properties: dict[str, object] = {"rate": 200, "volume": 1.0, "voices": voices or []}
        self.said: list[str] = []
        self.stops = 0

    def getProperty(self, name: str) -> object:
        return self.properties.get(name)

    def setProperty(self, name: str, value: object) -> None:
        self.properties[name] = value

    def say(self, text: str) -> None:
        self.said.append(text)

    def runAndWait(self) -> None:
        time.sleep(0.05)

    def stop(self) -> None:
        self.stops += 1


class _FakeCapture:
    def __init__(self, frames: list[np.ndarray | None], opened: bool = True) -> None:
        self.frames = frames
        self.opened = opened
        self.properties: dict[int, float] = {}
        self.released = False

    def isOpened(self) -> bool:
        return self.opened and not self.released

    def set(self, prop: int, value: float) -> bool:
        self.properties[prop] = value
        return True

    def read(self) -> tuple[bool, np.ndarray | None]:
        if not self.frames:
            return False, None
        frame = self.frames.pop(0)
        return frame is not None, frame

    def release(self) -> None:
        self.released = True


class _FakeTensor:
    def __init__(self, values: object) -> None:
        self._values = np.asarray(values, dtype=float)

    def cpu(self) -> "_FakeTensor":
        return self

    def numpy(self) -> np.ndarray:
        return self._values


class _FakeBoxes:
    def __init__(self, rows: list[tuple[float, float, float, float, float, int]]) -> None:
        self.xyxy = [_FakeTensor(row[:4]) for row in rows]
        self.conf = [_FakeTensor(row[4]) for row in rows]
        self.cls = [_FakeTensor(row[5]) for row in rows]

    def __len__(self) -> int:
        return len(self.xyxy)


class _FakeYolo:
    names = {0: "person", 2: "car"}

    def __init__(self, checkpoint: str) -> None:
        self.checkpoint = checkpoint
        self.inputs: list[np.ndarray] = []

    def predict(self, frame: np.ndarray, device: str, verbose: bool) -> list[object]:
        self.inputs.append(frame)
        rows = [(10.0, 20.0, 110.0, 220.0, 0.9, 0), (0.0, 0.0, 50.0, 40.0, 0.6, 2)]
        return [SimpleNamespace(boxes=_FakeBoxes(rows))]


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_voice_applies_rate_volume_and_language() -> None:
    voices = [
        SimpleNamespace(id="english", name="English", languages=[b"\x05en-us"]),
        SimpleNamespace(id="spanish", name="Spanish (Latin America)", languages=[b"\x05es-419"]),
    ]
    engine = _FakeEngine(voices)
    voice = Pyttsx3Voice(VoiceSettings(rate=1.5, volume=2.0), engine=engine)
    voice.close()

    assert engine.properties["rate"] == 300
    assert engine.properties["volume"] == 1.0
    assert engine.properties["voice"] == "spanish"


def test_voice_speaks_queued_text_before_closing() -> None:
    engine = _FakeEngine()
    voice = Pyttsx3Voice(VoiceSettings(), engine=engine)

    voice.speak("Detección iniciada")
    voice.speak("")
    voice.close()

    assert engine.said == ["Detección iniciada"]


def test_priority_speech_drops_queued_utterances() -> None:
    engine = _FakeEngine()
    voice = Pyttsx3Voice(VoiceSettings(), engine=engine)

    voice.speak("uno")
    assert _wait_for(lambda: engine.said == ["uno"])
    voice.speak("dos")
    voice.speak("tres")
    voice.speak("¡Alto!", priority=True)
    voice.close()

    assert engine.said[0] == "uno"
    assert engine.said[-1] == "¡Alto!"
    assert "tres" not in engine.said


def test_resolve_voice_respects_disabled_setting() -> None:
    assert isinstance(resolve_voice(VoiceSettings(enabled=False)), NullVoice)
    assert not NullVoice().is_supported()


def test_camera_reads_rgb_frames() -> None:
    bgr = np.zeros((48, 64, 3), dtype=np.uint8)
    bgr[..., 0] = 255
    capture = _FakeCapture([bgr])
    camera = CameraFrameSource(CameraSettings(index=2), capture_factory=lambda source: capture)

    camera.open()
    frame = asyncio.run(camera.next_frame())

    assert camera.ready
    assert frame[0, 0].tolist() == [0, 0, 255]
    assert (camera.width, camera.height) == (64, 48)
    camera.close()
    assert capture.released and not camera.ready


def test_camera_open_failure_raises() -> None:
    capture = _FakeCapture([], opened=False)
    camera = CameraFrameSource(capture_factory=lambda source: capture)

    with pytest.raises(RuntimeError):
        camera.open()
    assert capture.released


def test_camera_without_frame_raises_frame_unavailable() -> None:
    camera = CameraFrameSource(capture_factory=lambda source: _FakeCapture([None]))

    with pytest.raises(FrameUnavailable):
        camera.read()
    camera.open()
    with pytest.raises(FrameUnavailable):
        camera.read()


def test_camera_prefers_stream_url() -> None:
    sources: list[object] = []

    def factory(source: object) -> _FakeCapture:
        sources.append(source)
        return _FakeCapture([])

    CameraFrameSource(CameraSettings(index=1, url="http://cam.local/stream"), factory).open()

    assert sources == ["http://cam.local/stream"]


def test_model_loads_and_converts_boxes() -> None:
    model = YoloObjectModel(ModelSettings(name="tiny.pt"), loader=_FakeYolo)
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    frame[..., 0] = 7

    assert model.detect(frame) == []
    asyncio.run(model.load())
    predictions = model.detect(frame)

    assert model.is_loaded and not model.is_loading
    assert predictions == [
        {"class": "person", "score": pytest.approx(0.9), "bbox": (10.0, 20.0, 100.0, 200.0)},
        {"class": "car", "score": pytest.approx(0.6), "bbox": (0.0, 0.0, 50.0, 40.0)},
    ]
    assert model._model.inputs[0][0, 0].tolist() == [0, 0, 7]


def test_model_load_failure_is_reported() -> None:
    def broken_loader(checkpoint: str) -> None:
        raise FileNotFoundError(checkpoint)

    model = YoloObjectModel(loader=broken_loader)

    with pytest.raises(ModelLoadFailure):
        asyncio.run(model.load())
    assert not model.is_loaded and not model.is_loading
