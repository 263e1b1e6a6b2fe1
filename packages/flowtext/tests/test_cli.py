"""Tests for the flowtext CLI."""

from typer.testing import CliRunner

from flowtext.cli.main import app

runner = CliRunner()


class TestTypeCommand:
    """Tests for `flowtext type`."""

    def test_types_single_string(self):
        result = runner.invoke(
            app,
            ["type", "Hi", "--typing-speed", "0", "--pause", "0", "--no-cursor"],
        )
        assert result.exit_code == 0, result.output
        assert "Hi" in result.output

    def test_last_string_remains(self):
        result = runner.invoke(
            app,
            [
                "type",
                "one",
                "two",
                "--typing-speed",
                "0",
                "--deleting-speed",
                "0",
                "--pause",
                "0",
                "--no-cursor",
                "--seed",
                "3",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "two" in result.output

    def test_duration_stops_looping_run(self):
        result = runner.invoke(
            app,
            ["type", "ab", "--loop", "--typing-speed", "1", "--duration", "0.2"],
        )
        assert result.exit_code == 0, result.output

    def test_requires_text(self):
        result = runner.invoke(app, ["type"])
        assert result.exit_code != 0


class TestRevealCommand:
    """Tests for `flowtext reveal`."""

    def test_reveals_text(self):
        result = runner.invoke(app, ["reveal", "a b c", "--tps", "1000"])
        assert result.exit_code == 0, result.output
        assert "a b c" in result.output

    def test_blank_text(self):
        result = runner.invoke(app, ["reveal", "   "])
        assert result.exit_code == 0, result.output
        assert "Nothing to reveal" in result.output


class TestStreamCommand:
    """Tests for `flowtext stream`."""

    def test_streams_text(self):
        result = runner.invoke(
            app,
            [
                "stream",
                "streamed text arriving in pieces",
                "--chunk",
                "5",
                "--chunk-interval",
                "0",
                "--frame-interval",
                "0",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "streamed text arriving in pieces" in result.output

    def test_snap(self):
        result = runner.invoke(
            app, ["stream", "snapped at the end", "--chunk", "3", "--snap"]
        )
        assert result.exit_code == 0, result.output
        assert "snapped at the end" in result.output

    def test_blank_text(self):
        result = runner.invoke(app, ["stream", ""])
        assert result.exit_code == 0, result.output
        assert "Nothing to stream" in result.output
