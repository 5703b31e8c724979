"""Tests for the end-to-end subtitle pipeline."""

from __future__ import annotations

import numpy as np
import pytest

from streamsub.exceptions import AudioDecodeError, EngineError, StreamSubError
from streamsub.segmenter import SegmentationEngine
from streamsub.storage import FileStorageSink
from streamsub.subtitle_generator import SubtitleGenerator
from tests.conftest import SAMPLE_RATE, FakeDecoder, FakeEngine, seconds_of_silence


def make_generator(config, samples, engine, output_dir):
    return SubtitleGenerator(
        config=config,
        audio_decoder=FakeDecoder(samples),
        segmenter=SegmentationEngine(engine),
        storage=FileStorageSink(str(output_dir)),
    )


class TestSubtitleGenerator:
    def test_generate_writes_srt(self, base_config, tmp_path) -> None:
        engine = FakeEngine([("", False), ("hello world", True)])
        generator = make_generator(base_config, seconds_of_silence(45), engine, tmp_path / "subs")

        destination = generator.generate("/media/talk.mp3")

        assert destination == str(tmp_path / "subs" / "talk.srt")
        with open(destination, encoding="utf-8") as f:
            assert f.read() == "1\n00:00:30,000 --> 00:00:45,000\nhello world\n\n"

    def test_configured_output_name(self, base_config, tmp_path) -> None:
        base_config["output_name"] = "output.srt"
        generator = make_generator(base_config, seconds_of_silence(1), FakeEngine(), tmp_path)
        assert generator.generate("a.wav") == str(tmp_path / "output.srt")

    def test_silence_writes_empty_file(self, base_config, tmp_path) -> None:
        generator = make_generator(base_config, seconds_of_silence(2), FakeEngine(), tmp_path)
        destination = generator.generate("quiet.wav")
        with open(destination, encoding="utf-8") as f:
            assert f.read() == ""

    def test_decode_failure_skips_engine(self, base_config, tmp_path) -> None:
        engine = FakeEngine([("never", True)])
        generator = make_generator(base_config, np.zeros(0, dtype=np.float32), engine, tmp_path)
        with pytest.raises(AudioDecodeError):
            generator.generate("broken.mp3")
        assert engine.calls == []
        assert list(tmp_path.iterdir()) == []

    def test_engine_failure_writes_nothing(self, base_config, tmp_path) -> None:
        engine = FakeEngine([("x", False)], fail_on="accept_waveform")
        generator = make_generator(base_config, seconds_of_silence(1), engine, tmp_path)
        with pytest.raises(EngineError):
            generator.generate("a.wav")
        assert engine.released == 1
        assert list(tmp_path.iterdir()) == []

    def test_transcribe_reports_duration(self, base_config, tmp_path) -> None:
        generator = make_generator(base_config, seconds_of_silence(2.5), FakeEngine(), tmp_path)
        result = generator.transcribe("clip.wav")
        assert result.duration == 2.5
        assert result.sample_rate == SAMPLE_RATE
        assert result.source_path == "clip.wav"
        assert result.segments == []

    def test_uses_configured_chunk_seconds(self, base_config, tmp_path) -> None:
        base_config["chunk_seconds"] = 0.5
        engine = FakeEngine()
        make_generator(base_config, seconds_of_silence(2), engine, tmp_path).generate("a.wav")
        assert engine.fed == [SAMPLE_RATE // 2] * 4

    def test_sample_rate_mismatch(self, base_config, tmp_path) -> None:
        with pytest.raises(StreamSubError):
            SubtitleGenerator(
                config=base_config,
                audio_decoder=FakeDecoder(seconds_of_silence(1), sample_rate=8000),
                segmenter=SegmentationEngine(FakeEngine()),
                storage=FileStorageSink(str(tmp_path)),
            )

    def test_unexpected_error_is_wrapped(self, base_config, tmp_path) -> None:
        class ExplodingDecoder(FakeDecoder):
            def decode(self, audio_filepath):
                raise MemoryError("too big")

        generator = SubtitleGenerator(
            config=base_config,
            audio_decoder=ExplodingDecoder(None),
            segmenter=SegmentationEngine(FakeEngine()),
            storage=FileStorageSink(str(tmp_path)),
        )
        with pytest.raises(StreamSubError, match="too big"):
            generator.generate("a.wav")
