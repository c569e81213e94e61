from livechat import models
from livechat.channels import NEW_CONVERSATION, NEW_MESSAGE


def test_widget_hello_end_to_end(client, db, fake_pusher, make_user, login):
    agent = make_user()

    response = client.post("/api/messages", json={"text": "Hello", "sender": "customer"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    conversation_id = body["conversationId"]
    assert body["customerToken"]

    message = db.query(models.Message).filter(models.Message.conversation_id == conversation_id).one()
    assert message.text == "Hello"
    assert message.sender == "customer"

    [(channel, payload)] = fake_pusher.events(NEW_MESSAGE)
    assert channel == f"private-conversation-{conversation_id}"
    assert payload["id"] == message.id

    [(channel, payload)] = fake_pusher.events(NEW_CONVERSATION)
    assert channel == f"private-agent-{agent.id}"
    assert payload["id"] == conversation_id
    assert payload["message"]["id"] == message.id

    # the dashboard can now subscribe to the agent channel and the conversation
    login(agent)
    for channel_name in (f"private-agent-{agent.id}", f"private-conversation-{conversation_id}"):
        grant = client.post("/api/channel-auth", data={"socket_id": "123.456", "channel_name": channel_name})
        assert grant.status_code == 200
        assert grant.json()["auth"]


def test_message_is_not_echoed_back(client):
    body = client.post("/api/messages", json={"text": "Hello", "sender": "customer"}).json()
    assert set(body) == {"success", "conversationId", "customerToken"}


def test_follow_up_reuses_conversation(client, db):
    conversation_id = client.post("/api/messages", json={"text": "Hello", "sender": "customer"}).json()["conversationId"]

    response = client.post(
        "/api/messages",
        json={"text": "Still there?", "sender": "customer", "conversationId": conversation_id},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "conversationId": conversation_id}
    assert db.query(models.Conversation).count() == 1


def test_missing_text_is_400(client):
    response = client.post("/api/messages", json={"text": "  ", "sender": "customer"})
    assert response.status_code == 400
    assert response.json()["details"]["text"]


def test_bad_sender_is_400(client):
    response = client.post("/api/messages", json={"text": "hi", "sender": "bot"})
    assert response.status_code == 400
    assert "sender" in response.json()["details"]


def test_agent_message_requires_session(client):
    conversation_id = client.post("/api/messages", json={"text": "Hello", "sender": "customer"}).json()["conversationId"]

    response = client.post(
        "/api/messages",
        json={"text": "Hi, I'm Sam", "sender": "agent", "conversationId": conversation_id},
    )

    assert response.status_code == 401


def test_deleted_agent_cannot_send(client, db, make_user, login, fake_pusher):
    conversation_id = client.post("/api/messages", json={"text": "Hello", "sender": "customer"}).json()["conversationId"]
    ghost = make_user()
    login(ghost)
    db.delete(ghost)
    db.commit()

    response = client.post(
        "/api/messages",
        json={"text": "Still here", "sender": "agent", "conversationId": conversation_id},
    )

    assert response.status_code == 401
    assert db.query(models.Message).filter(models.Message.sender == "agent").count() == 0
    assert len(fake_pusher.events(NEW_MESSAGE)) == 1


def test_agent_message_without_conversation_is_400(client, make_user, login):
    login(make_user())
    response = client.post("/api/messages", json={"text": "Hi", "sender": "agent"})
    assert response.status_code == 400


def test_agent_reply(client, make_user, login, fake_pusher):
    conversation_id = client.post("/api/messages", json={"text": "Hello", "sender": "customer"}).json()["conversationId"]
    login(make_user())

    response = client.post(
        "/api/messages",
        json={"text": "Hi, I'm Sam", "sender": "agent", "conversationId": conversation_id},
    )

    assert response.status_code == 200
    assert fake_pusher.events(NEW_MESSAGE)[-1][1]["sender"] == "agent"


def test_unknown_conversation_is_404(client):
    response = client.post(
        "/api/messages",
        json={"text": "Hello", "sender": "customer", "conversationId": "does-not-exist"},
    )
    assert response.status_code == 404


def test_sending_clears_typing_flag(client, fake_redis):
    conversation_id = client.post("/api/messages", json={"text": "Hello", "sender": "customer"}).json()["conversationId"]
    client.post(f"/api/conversations/{conversation_id}/typing", params={"role": "customer"})
    assert fake_redis.exists(f"typing:agent:{conversation_id}")

    client.post("/api/messages", json={"text": "More", "sender": "customer", "conversationId": conversation_id})

    assert not fake_redis.exists(f"typing:agent:{conversation_id}")


def test_get_history(client):
    conversation_id = client.post(
        "/api/messages", json={"text": "one", "sender": "customer", "senderName": "Bo"}
    ).json()["conversationId"]
    client.post("/api/messages", json={"text": "two", "sender": "customer", "conversationId": conversation_id})

    response = client.get("/api/messages", params={"conversationId": conversation_id})

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == conversation_id
    assert body["name"] == "Bo"
    assert [m["text"] for m in body["messages"]] == ["one", "two"]
    assert body["messages"][0]["conversationId"] == conversation_id


def test_get_history_requires_id(client):
    assert client.get("/api/messages").status_code == 400


def test_get_history_unknown_id(client):
    assert client.get("/api/messages", params={"conversationId": "nope"}).status_code == 404
