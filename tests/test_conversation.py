from orchestrator.conversation import ConversationRegistry, ConversationStore


def test_history_keeps_insertion_order():
    store = ConversationStore()
    store.append("user", "서울 날씨 어때")
    store.append("model", "맑아요")
    assert [(t.role, t.text) for t in store.history()] == [("user", "서울 날씨 어때"), ("model", "맑아요")]


def test_history_is_a_copy():
    store = ConversationStore()
    store.append("user", "hi")
    store.history().clear()
    assert len(store) == 1


def test_trim_to_last_keeps_most_recent():
    store = ConversationStore()
    for i in range(7):
        store.append("user" if i % 2 == 0 else "model", str(i))
    store.trim_to_last(3)
    assert [t.text for t in store.history()] == ["4", "5", "6"]
    store.trim_to_last(10)
    assert len(store) == 3
    store.trim_to_last(0)
    assert store.history() == []


def test_reset_clears():
    store = ConversationStore()
    store.append("user", "a")
    store.reset()
    assert len(store) == 0


def test_registry_separates_sessions():
    registry = ConversationRegistry()
    registry.session("a").append("user", "from a")
    registry.session("b").append("user", "from b")
    assert [t.text for t in registry.session("a").history()] == ["from a"]
    assert registry.session("a") is registry.session("a")


def test_registry_reset():
    registry = ConversationRegistry()
    registry.session("a").append("user", "x")
    assert registry.reset("a") is True
    assert "a" not in registry
    assert registry.reset("a") is False
    assert len(registry.session("a")) == 0


def test_key_prefers_session_then_user():
    assert ConversationRegistry.key_for("s1", "u1") == "s1"
    assert ConversationRegistry.key_for(None, "u1") == "u1"
    assert ConversationRegistry.key_for(None, None) is None


def test_keyless_conversations_are_not_shared():
    registry = ConversationRegistry()
    first = registry.session(None)
    first.append("user", "from one caller")
    assert len(registry.session(None)) == 0
    assert len(registry) == 0


def test_registry_evicts_least_recently_used():
    registry = ConversationRegistry(max_sessions=2)
    registry.session("a").append("user", "a")
    registry.session("b").append("user", "b")
    registry.session("a")
    registry.session("c")
    assert len(registry) == 2
    assert "b" not in registry
    assert "a" in registry and "c" in registry
    assert [t.text for t in registry.session("a").history()] == ["a"]
