"""Tests for the sherpa-onnx engine adapter."""

from __future__ import annotations

import sys
import types

import pytest

from streamsub.exceptions import ConfigurationError, EngineError
from streamsub.models import RecognitionResult
from streamsub.recognizer import SherpaOnnxEngine


class FakeStream:
    def __init__(self):
        self.accepted = []

    def accept_waveform(self, sample_rate, samples):
        self.accepted.append((sample_rate, list(samples)))


class FakeRecognizer:
    """Mimics sherpa_onnx.OnlineRecognizer."""

    def __init__(self, result="hello", ready=2, endpoint=False):
        self.result = result
        self.ready = ready
        self.endpoint = endpoint
        self.decoded = 0
        self.resets = 0

    def create_stream(self):
        return FakeStream()

    def is_ready(self, stream):
        return self.decoded < self.ready

    def decode_stream(self, stream):
        self.decoded += 1

    def get_result(self, stream):
        return self.result

    def is_endpoint(self, stream):
        return self.endpoint

    def reset(self, stream):
        self.resets += 1


class TestSherpaOnnxEngine:
    def test_session_protocol(self) -> None:
        recognizer = FakeRecognizer(endpoint=True)
        engine = SherpaOnnxEngine(recognizer)
        with engine.session() as session:
            engine.accept_waveform(session, [0.1, 0.2], 16000)
            steps = 0
            while engine.is_ready(session):
                engine.decode_step(session)
                steps += 1
            assert steps == 2
            assert engine.get_result(session) == RecognitionResult(text="hello")
            assert engine.is_endpoint(session) is True
            engine.reset_session(session)
        assert session.accepted == [(16000, [0.1, 0.2])]
        assert recognizer.resets == 1

    def test_result_object_with_text(self) -> None:
        engine = SherpaOnnxEngine(FakeRecognizer(result=types.SimpleNamespace(text="obj")))
        with engine.session() as session:
            assert engine.get_result(session).text == "obj"

    def test_none_result_reads_as_blank(self) -> None:
        engine = SherpaOnnxEngine(FakeRecognizer(result=None))
        with engine.session() as session:
            assert engine.get_result(session).text == ""

    def test_released_session_is_unusable(self) -> None:
        engine = SherpaOnnxEngine(FakeRecognizer())
        with engine.session() as session:
            pass
        with pytest.raises(EngineError):
            engine.is_ready(session)
        with pytest.raises(EngineError):
            engine.release_session(session)

    def test_session_released_on_error(self) -> None:
        engine = SherpaOnnxEngine(FakeRecognizer())
        with pytest.raises(RuntimeError):
            with engine.session() as session:
                raise RuntimeError("boom")
        with pytest.raises(EngineError):
            engine.release_session(session)

    def test_underlying_failure_is_wrapped(self) -> None:
        recognizer = FakeRecognizer()

        def broken(stream):
            raise RuntimeError("onnxruntime error")

        recognizer.decode_stream = broken
        engine = SherpaOnnxEngine(recognizer)
        with engine.session() as session:
            with pytest.raises(EngineError, match="decode_stream failed"):
                engine.decode_step(session)


class TestFromConfig:
    def test_missing_model_files(self, base_config, tmp_path) -> None:
        base_config.update(model_type="zipformer2_ctc", tokens=str(tmp_path / "tokens.txt"), model=None)
        with pytest.raises(ConfigurationError, match="tokens"):
            SherpaOnnxEngine.from_config(base_config)

    def test_builds_zipformer2_ctc(self, base_config, tmp_path, monkeypatch) -> None:
        tokens = tmp_path / "tokens.txt"
        model = tmp_path / "model.int8.onnx"
        tokens.write_text("a 0\n")
        model.write_bytes(b"onnx")
        captured = {}

        class FakeOnlineRecognizer:
            @staticmethod
            def from_zipformer2_ctc(**kwargs):
                captured.update(kwargs)
                return FakeRecognizer()

        fake_module = types.ModuleType("sherpa_onnx")
        fake_module.OnlineRecognizer = FakeOnlineRecognizer
        monkeypatch.setitem(sys.modules, "sherpa_onnx", fake_module)

        base_config.update(model_type="zipformer2_ctc", tokens=str(tokens), model=str(model), num_threads=4)
        engine = SherpaOnnxEngine.from_config(base_config)

        assert isinstance(engine.recognizer, FakeRecognizer)
        assert captured["model"] == str(model)
        assert captured["num_threads"] == 4
        assert captured["sample_rate"] == 16000
        assert captured["enable_endpoint_detection"] is True

    def test_load_failure_is_engine_error(self, base_config, tmp_path, monkeypatch) -> None:
        for name in ("tokens.txt", "encoder.onnx", "decoder.onnx", "joiner.onnx"):
            (tmp_path / name).write_text("x")

        class FakeOnlineRecognizer:
            @staticmethod
            def from_transducer(**kwargs):
                raise RuntimeError("bad model")

        fake_module = types.ModuleType("sherpa_onnx")
        fake_module.OnlineRecognizer = FakeOnlineRecognizer
        monkeypatch.setitem(sys.modules, "sherpa_onnx", fake_module)

        base_config.update(
            model_type="transducer",
            tokens=str(tmp_path / "tokens.txt"),
            encoder=str(tmp_path / "encoder.onnx"),
            decoder=str(tmp_path / "decoder.onnx"),
            joiner=str(tmp_path / "joiner.onnx"),
        )
        with pytest.raises(EngineError, match="bad model"):
            SherpaOnnxEngine.from_config(base_config)
