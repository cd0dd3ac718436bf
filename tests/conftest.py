import pytest

from surveynav.engine import SurveyNavigator
from surveynav.examples import build_example_branching_survey


@pytest.fixture
def graph():
    return build_example_branching_survey()


@pytest.fixture
def nav(graph):
    return SurveyNavigator(graph)


@pytest.fixture
def nav_at_q2(nav):
    """Navigator positioned on Q2 via Start -> Q1 (Yes) -> Q2."""
    nav.advance_to_next()
    nav.update_single_answer("Q1", "Yes")
    nav.advance_to_next()
    assert nav.current_node_id == "Q2"
    return nav
