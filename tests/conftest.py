"""
Shared test fixtures for the test suite.

Fixtures provide small ARFF documents covering dense, sparse, date/string
and relational headers, plus helpers to write them to disk.
"""

import logging
import shutil
import tempfile
from pathlib import Path

import pytest

WEATHER_ARFF = """\
% Weather data, Quinlan 1986
@relation weather

@attribute outlook {sunny, overcast, rainy}
@attribute temperature numeric
@attribute humidity numeric
@attribute windy {TRUE, FALSE}
@attribute play {yes, no}

@data
sunny,85,85,FALSE,no
sunny,80,90,TRUE,no
overcast,83,86,FALSE,yes
rainy,70,96,FALSE,yes
rainy,68,80,FALSE,yes
"""

SPARSE_ARFF = """\
@relation sparse_demo
@attribute a numeric
@attribute b numeric
@attribute c string
@attribute class {pos, neg}
@data
{0 1.5, 3 pos}
{1 2, 2 hello, 3 neg}
"""

EVENTS_ARFF = """\
@relation events
@attribute when date "yyyy-MM-dd HH:mm:ss"
@attribute note string
@attribute target numeric
@data
"2024-01-05 10:30:00",'hello, world',1.5
"not a date",plain,?
"""

RELATIONAL_ARFF = """\
@relation multi
@attribute id numeric
@attribute bag relational
  @attribute inner1 numeric
  @attribute inner2 numeric
@end bag
@attribute class {a, b}
@data
1,a
2,b
"""


@pytest.fixture
def weather_arff():
    return WEATHER_ARFF


@pytest.fixture
def sparse_arff():
    return SPARSE_ARFF


@pytest.fixture
def events_arff():
    return EVENTS_ARFF


@pytest.fixture
def relational_arff():
    return RELATIONAL_ARFF


@pytest.fixture
def temp_dir():
    """
    Create a temporary directory for test artifacts.

    The directory is automatically cleaned up after the test.
    """
    tmp_dir = tempfile.mkdtemp()
    yield Path(tmp_dir)
    shutil.rmtree(tmp_dir, ignore_errors=True)


@pytest.fixture
def weather_file(temp_dir):
    path = temp_dir / "weather.arff"
    path.write_text(WEATHER_ARFF, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers attached by setup_logger (the CLI installs a stdout handler)."""
    yield
    logger = logging.getLogger("arff_dataset")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
