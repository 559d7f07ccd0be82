import importlib.util
from pathlib import Path

from sqlmodel import select

from reporover.models import Achievement, LearningPath

SEED_SCRIPT = Path(__file__).resolve().parents[1] / "init" / "1_populate_seed_data.py"


def _load_seed_module():
    spec = importlib.util.spec_from_file_location("populate_seed_data", SEED_SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_seed_is_idempotent(session):
    seed = _load_seed_module()

    assert seed.populate_seed_data(session) == {"achievements": 10, "learning_paths": 3}
    assert seed.populate_seed_data(session) == {"achievements": 0, "learning_paths": 0}

    assert len(session.exec(select(Achievement)).all()) == 10
    titles = [p.title for p in session.exec(select(LearningPath).order_by(LearningPath.order_index)).all()]
    assert len(titles) == 3


def test_seed_fills_in_missing_rows(session):
    seed = _load_seed_module()
    session.add(Achievement(**{**seed.ACHIEVEMENTS[0], "requirement_type": seed.ACHIEVEMENTS[0]["requirement_type"].value}))
    session.commit()

    assert seed.populate_seed_data(session)["achievements"] == len(seed.ACHIEVEMENTS) - 1
