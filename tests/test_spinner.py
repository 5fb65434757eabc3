from __future__ import annotations

import io

import pytest

from tonegen.spinner import Spinner, render_error


def test_disabled_spinner_is_a_noop() -> None:
    stream = io.StringIO()
    with Spinner("Rendering", stream=stream) as spinner:
        spinner.update("Still rendering")
    assert stream.getvalue() == ""


def test_render_error_plain_stream(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TONEGEN_DEBUG", raising=False)
    stream = io.StringIO()
    render_error("tonegen CLI", ValueError("boom"), stream=stream)
    output = stream.getvalue()
    assert output.startswith("tonegen CLI failed: ValueError: boom")
    assert "logs:" in output


def test_render_error_with_debug_trace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TONEGEN_DEBUG", "1")
    stream = io.StringIO()
    try:
        raise RuntimeError("kaput")
    except RuntimeError as exc:
        render_error("render", exc, stream=stream)
    assert "Traceback" in stream.getvalue()
