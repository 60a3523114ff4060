import logging

from sheetstore import logging_config


def test_configure_logging_writes_to_file_once(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)
    root = logging.getLogger()
    before = list(root.handlers)
    previous_level = root.level
    log_path = tmp_path / "logs" / "sheetstore.log"

    try:
        logging_config.configure_logging("debug", log_path)
        logging_config.configure_logging(logging.INFO, log_path)
        added = [handler for handler in root.handlers if handler not in before]

        assert len(added) == 1
        assert isinstance(added[0], logging.FileHandler)
        assert root.level == logging.INFO

        logging.getLogger("sheetstore.test").warning("row %s skipped", 3)
        added[0].flush()
        text = log_path.read_text(encoding="utf-8")
        assert "[WARNING] sheetstore.test: row 3 skipped" in text
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(previous_level)
