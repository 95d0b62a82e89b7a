"""
Shared fixtures for the ohmage tests
"""
from pathlib import Path

import pytest

from ohmage.domain.campaign.prompt import DisplayType
from ohmage.domain.campaign.xml_parser import parse_campaign

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def campaign_xml():
    return (FIXTURES / "sleep_campaign.xml").read_text(encoding="utf-8")


@pytest.fixture
def campaign(campaign_xml):
    return parse_campaign(campaign_xml)


@pytest.fixture
def sleep_survey(campaign):
    return campaign.get_survey("sleep")


@pytest.fixture
def mood_survey(campaign):
    return campaign.get_survey("mood")


def prompt_args(**overrides):
    """Keyword arguments shared by every prompt constructor"""
    args = {
        "id": "q",
        "condition": None,
        "unit": None,
        "text": "Question?",
        "abbreviated_text": None,
        "explanation_text": None,
        "skippable": False,
        "skip_label": None,
        "display_type": DisplayType.MEASUREMENT,
        "display_label": "Q",
        "index": 0,
    }
    args.update(overrides)
    return args
