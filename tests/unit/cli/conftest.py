import pytest
from unittest.mock import patch


@pytest.fixture
def sbom_file(tmp_path):
    """An existing (content-irrelevant) SBOM file for argument validation."""
    path = tmp_path / "bom.json"
    path.write_text("{}", encoding="utf-8")
    return str(path)


@pytest.fixture
def arg_parser():
    """Parse an argument list without affecting sys.argv."""
    def _parse(args_list):
        from sbom_ingest.cli import parse_cmdline_args
        with patch('sys.argv', args_list):
            return parse_cmdline_args()
    return _parse


@pytest.fixture
def mock_main_dependencies():
    """Mock every handler main() can dispatch to."""
    mocks = {}
    with patch("sbom_ingest.main.handle_detect") as mock_detect, \
         patch("sbom_ingest.main.handle_parse") as mock_parse, \
         patch("sbom_ingest.main.handle_validate") as mock_validate, \
         patch("sbom_ingest.main.setup_logging") as mock_logging:
        mocks['handle_detect'] = mock_detect
        mocks['handle_parse'] = mock_parse
        mocks['handle_validate'] = mock_validate
        mocks['setup_logging'] = mock_logging
        yield mocks


class ArgBuilder:
    """Builder pattern for constructing test arguments."""

    def __init__(self):
        self.args = ['sbom-ingest']

    def log_level(self, level='INFO'):
        self.args.extend(['--log', level])
        return self

    def detect(self, path):
        self.args.extend(['detect', '--path', path])
        return self

    def parse(self, path):
        self.args.extend(['parse', '--path', path])
        return self

    def validate(self, path):
        self.args.extend(['validate', '--path', path])
        return self

    def output(self, path):
        self.args.extend(['--output', path])
        return self

    def flag(self, name):
        self.args.append(name)
        return self

    def option(self, name, value):
        self.args.extend([name, value])
        return self

    def build(self):
        return self.args.copy()


@pytest.fixture
def args():
    """Fixture providing the ArgBuilder for constructing test arguments."""
    return ArgBuilder
