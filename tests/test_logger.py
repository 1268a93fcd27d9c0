from utils.logger import Logger


def test_progress_writes_to_stdout(capsys) -> None:
    items = list(Logger.progress(range(3), desc="Collecting patterns", total=3))
    assert items == [0, 1, 2]
    out, err = capsys.readouterr()
    assert "Collecting patterns" in out
    assert "Collecting patterns" not in err
