from main import main, parse_args


def test_parse_args():
    args = parse_args(["-c", "config.yaml", "--log-level", "DEBUG"])

    assert str(args.config) == "config.yaml"
    assert args.log_level == "DEBUG"


def test_missing_config_exits_with_error(tmp_path, capsys):
    assert main(["-c", str(tmp_path / "missing.yaml")]) == 1
    assert "Config file not found" in capsys.readouterr().err
