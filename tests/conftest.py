import pandas as pd
import pytest

from explicit_promise import Environment
from explicit_promise.logger import reset_logger

# Shared fixtures: a small record set in the shape of the classic mtcars
# example, and a scope binding a few names.


@pytest.fixture
def records():
    return pd.DataFrame(
        {"mpg": [21, 30, 32], "cyl": [6, 4, 4]},
        index=["Mazda RX4", "Honda Civic", "Toyota Corolla"],
    )


@pytest.fixture
def env():
    """A fresh scope for each test, enclosed by the builtins."""
    return Environment.from_mapping({"x": 2, "y": 3, "mpg": [0, 0, 0]})


@pytest.fixture
def clean_logger():
    reset_logger()
    yield
    reset_logger()
