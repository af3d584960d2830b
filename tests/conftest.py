import logging
import random

import pytest

from ppgen.hashing import ScryptHasher


@pytest.fixture
def rng():
    return random.Random(20150913)


@pytest.fixture
def fast_hasher():
    # Real scrypt with tiny cost parameters so tests stay quick.
    return ScryptHasher(n=16, r=1, p=1)


@pytest.fixture(autouse=True)
def reset_ppgen_logger():
    yield
    # The CLI attaches handlers bound to the captured streams of its test.
    logger = logging.getLogger("ppgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
