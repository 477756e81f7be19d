import pytest

from toolrelay.config.schema import SessionConfig
from toolrelay.core.session import Message, Session


@pytest.fixture
def session():
    return Session(SessionConfig(max_history_messages=10))


def test_start_creates_system_message(session):
    session.start("You are helpful.")
    assert len(session.messages) == 1
    assert session.messages[0].role == "system"
    assert session.messages[0].content == "You are helpful."


def test_start_clears_previous_history(session):
    session.start("prompt 1")
    session.add_message(Message(role="user", content="hello"))
    session.start("prompt 2")
    assert len(session.messages) == 1
    assert session.messages[0].content == "prompt 2"


def test_add_message(session):
    session.start("sys")
    session.add_message(Message(role="user", content="hi"))
    session.add_message(Message(role="assistant", content="hello"))
    assert len(session.messages) == 3


def test_is_started(session):
    assert not session.is_started
    session.start("sys")
    assert session.is_started


def test_get_ollama_messages(session):
    session.start("sys")
    session.add_message(Message(role="user", content="hi"))
    msgs = session.get_ollama_messages()
    assert msgs == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "hi"},
    ]


def test_get_ollama_messages_with_tool_calls(session):
    session.start("sys")
    session.add_message(Message(
        role="assistant",
        content="",
        tool_calls=[{"name": "test", "arguments": {}}],
    ))
    msgs = session.get_ollama_messages()
    assert msgs[1]["tool_calls"] == [{"name": "test", "arguments": {}}]


def test_tool_results_carry_tool_name(session):
    session.start("sys")
    session.add_tool_result("echo", "Echo: hi")
    assert session.get_ollama_messages()[1] == {
        "role": "tool",
        "content": "Echo: hi",
        "tool_name": "echo",
    }


def test_tools_used_in_first_use_order(session):
    session.start("sys")
    session.add_tool_result("time", "ISO format: now")
    session.add_tool_result("echo", "Echo: a")
    session.add_tool_result("time", "ISO format: later")
    assert session.tools_used() == ["time", "echo"]


def test_messages_is_a_copy(session):
    session.start("sys")
    session.messages.append(Message(role="user", content="sneaky"))
    assert len(session.messages) == 1


def test_history_trimming(session):
    session.start("sys")
    for i in range(15):
        session.add_message(Message(role="user", content=f"msg {i}"))
    # max is 10: system + 9 most recent
    assert len(session.messages) == 10
    assert session.messages[0].role == "system"
    assert session.messages[1].content == "msg 6"


@pytest.mark.parametrize("limit, expected", [(1, ["sys"]), (2, ["sys", "msg 4"]), (0, ["sys"])])
def test_history_trimming_small_limits(limit, expected):
    session = Session(SessionConfig(max_history_messages=limit))
    session.start("sys")
    for i in range(5):
        session.add_message(Message(role="user", content=f"msg {i}"))
    assert [m.content for m in session.messages] == expected
