"""Tests for per-request disk logs."""

import pytest

from duckproxy.logging import RequestLogRecorder, wait_for_pending_logs


class TestRequestLogRecorder:
    """Tests for capturing and flushing a request log."""

    def test_disabled_recorder_writes_nothing(self, tmp_path):
        recorder = RequestLogRecorder("gpt-4o-mini", False, enabled=False, log_dir=tmp_path)
        recorder.record_request("POST", "/v1/chat/completions", {}, b"{}")
        recorder.finalize("success")
        assert recorder.finalized
        assert list(tmp_path.iterdir()) == []

    def test_writes_masked_log_synchronously_outside_loop(self, tmp_path):
        recorder = RequestLogRecorder("meta-llama/Llama 3", True, log_dir=tmp_path)
        recorder.record_request(
            "POST",
            "/v1/chat/completions",
            {"Authorization": "Bearer secret", "x-vqd-4": "4-abcdef"},
            b'{"model": "x"}',
        )
        recorder.record_token_source("caller")
        recorder.record_backend_response(200, {"content-type": "text/event-stream"})
        recorder.record_stream_chunk(b'data: {"message":"hi"}\n\n')
        recorder.record_error("stream read error")
        recorder.finalize("error")

        assert recorder.log_path.parent == tmp_path
        assert "meta-llama-Llama-3" in recorder.log_path.name
        text = recorder.log_path.read_text(encoding="utf-8")
        assert "token_source=caller" in text
        assert "secret" not in text
        assert "4-abcdef" not in text
        assert "-- STREAM CHUNK 1" in text
        assert "ERROR: stream read error" in text
        assert "FINAL STATUS: error" in text

    def test_finalize_is_idempotent(self, tmp_path):
        recorder = RequestLogRecorder("m", False, log_dir=tmp_path)
        recorder.finalize("success")
        recorder.record_error("ignored")
        recorder.finalize("error")
        text = recorder.log_path.read_text(encoding="utf-8")
        assert "FINAL STATUS: success" in text
        assert "ignored" not in text

    @pytest.mark.asyncio
    async def test_flushes_off_the_event_loop(self, tmp_path):
        recorder = RequestLogRecorder("m", False, log_dir=tmp_path)
        recorder.finalize("success")
        await wait_for_pending_logs()
        assert recorder.log_path.exists()
