import stakerewards
from stakerewards import version


def test_local_tag_from_describe():
    assert version.local_tag("v0.1.0-3-gabc1234-dirty") == "gabc1234.dirty"
    assert version.local_tag("abc1234") == "abc1234"
    assert version.local_tag("1234abc") == "g1234abc"


def test_env_pin_wins(monkeypatch):
    monkeypatch.setenv("STAKEREWARDS_VERSION", "9.9.9")
    assert version.build_version() == "9.9.9"


def test_package_exposes_version_and_lazy_modules():
    assert stakerewards.get_version() == stakerewards.__version__
    assert stakerewards.pool.StakingRewardsPool.__name__ == "StakingRewardsPool"
    assert "ledger" in dir(stakerewards)
