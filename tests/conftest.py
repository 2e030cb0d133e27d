import json
import os
import shutil
import tempfile

import pytest

from regionquery.models import Point


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep user/local config files and REGIONQUERY_* variables out of tests."""
    import regionquery.config
    import regionquery.db

    for key in list(os.environ):
        if key.startswith("REGIONQUERY_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(regionquery.config, "_config", None)
    monkeypatch.setattr(regionquery.db, "_db", None)


@pytest.fixture
def sample_points():
    """
    Sample inspection points.

    Inside the region (0,0)-(10,10): 1, 3, 4, 5, 6, 8, 9
    Groups entirely inside it:      2 (ids 3, 4), 3 (ids 5, 6), 5 (id 9)
    Points 1 and 9 share coordinates.
    """
    return [
        Point(id=1, group_id=1, x=5.0, y=5.0, category=0),
        Point(id=2, group_id=1, x=20.0, y=20.0, category=0),
        Point(id=3, group_id=2, x=1.0, y=2.0, category=1),
        Point(id=4, group_id=2, x=3.0, y=4.0, category=1),
        Point(id=5, group_id=3, x=8.0, y=1.0, category=2),
        Point(id=6, group_id=3, x=2.0, y=8.0, category=0),
        Point(id=7, group_id=4, x=-5.0, y=5.0, category=1),
        Point(id=8, group_id=4, x=6.0, y=6.0, category=1),
        Point(id=9, group_id=5, x=5.0, y=5.0, category=2),
    ]


@pytest.fixture
def memory_store(sample_points):
    """In-memory store holding the sample points."""
    from regionquery.store import MemoryStore
    return MemoryStore(sample_points)


@pytest.fixture
def temp_db():
    """Create a temporary database file path."""
    temp_dir = tempfile.mkdtemp(prefix="regionquery_test_db_")
    db_path = os.path.join(temp_dir, "test.db")
    yield db_path
    shutil.rmtree(temp_dir)


@pytest.fixture
def populated_db(temp_db, sample_points):
    """SQLite database holding the sample points."""
    from regionquery.db import Database
    db = Database(path=temp_db)
    db.add_points(sample_points)
    return db


@pytest.fixture(params=["memory", "sqlite"])
def store(request, memory_store, temp_db, sample_points):
    """Each store implementation, loaded with the sample points."""
    if request.param == "memory":
        return memory_store
    from regionquery.db import Database
    db = Database(path=temp_db)
    db.add_points(sample_points)
    return db


@pytest.fixture
def crop_json():
    """Build a crop operation object in the description format."""
    def build(min_x, min_y, max_x, max_y, **params):
        body = {
            "region": {
                "p_min": {"x": min_x, "y": min_y},
                "p_max": {"x": max_x, "y": max_y},
            }
        }
        body.update(params)
        return {"operator_crop": body}
    return build


@pytest.fixture
def query_file(tmp_path):
    """Write a description to a file and return its path."""
    def write(description, name="query.json"):
        path = tmp_path / name
        path.write_text(json.dumps(description), encoding="utf-8")
        return path
    return write
