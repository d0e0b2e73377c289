from prompt_toolkit.keys import Keys

from beadtree import BeadTreeTUI


def _bindings_for(tui, key):
    return [
        b for b in tui.app.key_bindings.bindings
        if any((getattr(k, "key", k) == key) or k == key for k in b.keys)
    ]


def test_escape_binding_is_eager():
    tui = BeadTreeTUI()
    esc_bindings = _bindings_for(tui, Keys.Escape)
    assert esc_bindings, "Escape binding not found"
    assert all(b.eager() if callable(b.eager) else bool(b.eager) for b in esc_bindings)


def test_escape_does_not_wait_for_sequences():
    tui = BeadTreeTUI()
    assert tui.app.key_bindings.timeout == 0


def test_russian_layout_aliases_are_bound():
    tui = BeadTreeTUI()
    for key in ("й", "о", "л", "д", "р", "м", "к", "в", "т", "ч", "ы", "ш", "с", "щ"):
        assert _bindings_for(tui, key), f"{key} is not bound"


def test_type_to_filter_binding_is_eager():
    tui = BeadTreeTUI()
    any_bindings = _bindings_for(tui, Keys.Any)
    assert len(any_bindings) == 1
    assert any_bindings[0].eager()


def test_mutation_keys_are_bound():
    tui = BeadTreeTUI()
    for key in ("s", "i", "c", "o", "C", "L", "D"):
        assert _bindings_for(tui, key), f"{key} is not bound"
