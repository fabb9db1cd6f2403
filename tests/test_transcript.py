from __future__ import annotations

from chatcal.domain import ChatRole


async def test_messages_round_trip_in_order(transcript, store) -> None:
    lunch = store.create("Lunch", "2025-01-01T12:00:00", "2025-01-01T13:00:00", "Tacos")

    await transcript.save_message(ChatRole.USER, "what's on today?")
    await transcript.save_message(ChatRole.ASSISTANT, [lunch])
    await transcript.save_message(ChatRole.ASSISTANT, "Event created successfully.")

    messages = await transcript.get_all_messages()

    assert [message.role for message in messages] == [ChatRole.USER, ChatRole.ASSISTANT, ChatRole.ASSISTANT]
    assert messages[0].content == "what's on today?"
    assert messages[1].is_event_list
    assert messages[1].content == [lunch]
    assert messages[2].content == "Event created successfully."
    assert messages[0].timestamp is not None


async def test_empty_event_list_is_kept_as_list(transcript) -> None:
    await transcript.save_message(ChatRole.ASSISTANT, [])
    [message] = await transcript.get_all_messages()
    assert message.content == []


async def test_clear_all(transcript) -> None:
    await transcript.save_message(ChatRole.USER, "hello")
    await transcript.clear_all()
    assert await transcript.get_all_messages() == []
