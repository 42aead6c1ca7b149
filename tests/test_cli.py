import json

import pytest

from innerfield import cli
from innerfield.time_engine import COPY


def test_tick_first_open(inner_home, capsys):
    assert cli.main(["tick", "--now", "2025-03-03T09:00"]) == 0
    out = capsys.readouterr().out
    assert "streak: 1" in out
    assert "(silence)" in out
    assert (inner_home / "state.json").exists()


def test_state_and_reset(inner_home, capsys):
    cli.main(["tick", "--now", "2025-03-03T09:00"])
    capsys.readouterr()
    cli.main(["state"])
    state = json.loads(capsys.readouterr().out)
    assert state["last_date"] == "2025-03-03"
    assert state["streak"] == 1

    cli.main(["reset"])
    capsys.readouterr()
    cli.main(["state"])
    assert json.loads(capsys.readouterr().out)["streak"] is None


def test_force(inner_home, capsys):
    cli.main(["force", "streak.7"])
    assert capsys.readouterr().out.strip() == COPY["streak.7"]


def test_force_rejects_unknown_id(inner_home):
    with pytest.raises(SystemExit):
        cli.main(["force", "streak.8"])


def test_bad_now_is_a_usage_error(inner_home):
    with pytest.raises(SystemExit):
        cli.main(["tick", "--now", "yesterday"])


def test_intentions_and_nudge(inner_home, capsys):
    cli.main(["intentions", "set", "calm", "clarity"])
    assert "Calm & Clarity" in capsys.readouterr().out

    cli.main(["intentions"])
    assert "Calm & Clarity" in capsys.readouterr().out

    # chosen just now: too early for a nudge
    cli.main(["nudge"])
    assert "(no nudge)" in capsys.readouterr().out

    cli.main(["intentions", "clear"])
    capsys.readouterr()
    cli.main(["intentions"])
    assert "(none)" in capsys.readouterr().out


def test_nudge_shown(inner_home, capsys):
    cli.main(["nudge-shown", "--now", "2025-03-03T09:00"])
    assert "cooldown started" in capsys.readouterr().out
