from __future__ import annotations

import copy

import pytest

from lighthouse.config import get_settings

BULB = {
    "state": {
        "on": True,
        "bri": 254,
        "hue": 8418,
        "sat": 140,
        "effect": "none",
        "xy": [0.4573, 0.41],
        "ct": 366,
        "alert": "select",
        "colormode": "ct",
        "mode": "homeautomation",
        "reachable": True,
    },
    "swupdate": {"state": "noupdates", "lastinstall": "2020-01-14T10:25:31"},
    "type": "Extended color light",
    "name": "Living room",
    "modelid": "LCT015",
    "manufacturername": "Signify Netherlands B.V.",
    "productname": "Hue color lamp",
    "capabilities": {"certified": True, "control": {"mindimlevel": 1000}},
    "config": {"archetype": "sultanbulb", "function": "mixed"},
    "uniqueid": "00:17:88:01:04:0a:0b:0c-0b",
    "swversion": "1.50.2_r30933",
    "swconfigid": "772B0E5E",
    "productid": "Philips-LCT015-1-A19ECLv5",
}

STRIP = {
    "state": {
        "on": False,
        "bri": 100,
        "hue": 0,
        "sat": 0,
        "xy": [0.3, 0.3],
        "alert": "none",
        "colormode": "xy",
        "reachable": True,
    },
    "swupdate": {"state": "noupdates", "lastinstall": None},
    "type": "Color light",
    "name": "Kitchen strip",
    "modelid": "LST001",
    "manufacturername": "Philips",
    "uniqueid": "00:17:88:01:00:aa:bb:cc-0b",
    "swversion": "5.127.1.26581",
}


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.delenv("LIGHTHOUSE_CONFIG", raising=False)
    monkeypatch.delenv("HUE_BRIDGE_IP", raising=False)
    monkeypatch.delenv("HUE_BRIDGE_KEY", raising=False)
    monkeypatch.delenv("LOGLEVEL", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def bulb() -> dict:
    return copy.deepcopy(BULB)


@pytest.fixture
def strip() -> dict:
    return copy.deepcopy(STRIP)
