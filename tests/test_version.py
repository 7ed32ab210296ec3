import tomllib
from pathlib import Path

import morsetrainer


def test_package_version_matches_pyproject() -> None:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    with pyproject.open("rb") as handle:
        expected = tomllib.load(handle)["project"]["version"]
    assert morsetrainer.__version__ == expected
