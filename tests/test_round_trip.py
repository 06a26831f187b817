"""Round-trip tests - import(export(tree)) and export stability."""

import pytest

from dialogue_forge import export_yarn, import_yarn
from dialogue_forge.schemas.dialogue import (
    BlockType,
    Choice,
    Condition,
    ConditionalBlock,
    ConditionOperator,
    DialogueTree,
    NpcNode,
    PlayerNode,
)


def _round_trip(tree: DialogueTree) -> DialogueTree:
    result = import_yarn(export_yarn(tree), title=tree.title)
    assert result.diagnostics == []
    return result.tree


def test_linear_tree_round_trip():
    tree = DialogueTree(
        id="t",
        title="T",
        start_node_id="start",
        nodes={
            "start": NpcNode(id="start", speaker="Guard", content="Halt!", next_node_id="next"),
            "next": NpcNode(id="next", speaker="Guard", content="Move along."),
        },
    )
    imported = _round_trip(tree)
    assert list(imported.nodes) == ["start", "next"]
    assert imported.start_node_id == "start"
    assert imported.nodes["start"].speaker == "Guard"
    assert imported.nodes["start"].content == "Halt!"
    assert imported.nodes["start"].next_node_id == "next"


def test_player_node_round_trip():
    gold_check = [Condition(flag="gold", operator=ConditionOperator.GREATER_EQUAL, value=100)]
    tree = DialogueTree(
        id="t",
        title="T",
        start_node_id="shop",
        nodes={
            "shop": PlayerNode(
                id="shop",
                speaker="Merchant",
                content="What will it be?",
                choices=[
                    Choice(id="a", text="Buy", next_node_id="done", conditions=gold_check, set_flags=["bought"]),
                    Choice(id="b", text="Leave", next_node_id="done"),
                ],
            ),
            "done": NpcNode(id="done", content="Bye."),
        },
    )
    shop = _round_trip(tree).nodes["shop"]
    assert isinstance(shop, PlayerNode)
    assert [c.text for c in shop.choices] == ["Buy", "Leave"]
    assert shop.choices[0].conditions == gold_check
    assert shop.choices[0].set_flags == ["bought"]
    assert shop.choices[0].next_node_id == "done"
    assert shop.choices[1].conditions is None


def test_player_node_with_conditional_blocks_round_trip():
    """Dialogue arms before the choices come back as blocks; the guarded choice keeps its condition."""
    blocks = [
        ConditionalBlock(
            id="b0",
            type=BlockType.IF,
            condition=[Condition(flag="trusted", operator=ConditionOperator.IS_SET)],
            content="Psst, over here.",
            speaker="Smuggler",
        ),
        ConditionalBlock(id="b1", type=BlockType.ELSE, content="Move along.", speaker="Smuggler"),
    ]
    gold_check = [Condition(flag="gold", operator=ConditionOperator.GREATER_EQUAL, value=5)]
    tree = DialogueTree(
        id="t",
        title="T",
        start_node_id="alley",
        nodes={
            "alley": PlayerNode(
                id="alley",
                speaker="Smuggler",
                content="Well?",
                conditional_blocks=blocks,
                choices=[
                    Choice(id="c0", text="Buy", next_node_id="deal", conditions=gold_check),
                    Choice(id="c1", text="Leave", next_node_id="road"),
                ],
            ),
        },
    )
    imported = _round_trip(tree)
    alley = imported.nodes["alley"]
    assert isinstance(alley, PlayerNode)
    assert alley.content == "Well?"
    assert [b.type for b in alley.conditional_blocks] == [BlockType.IF, BlockType.ELSE]
    assert [b.condition for b in alley.conditional_blocks] == [blocks[0].condition, None]
    assert [b.content for b in alley.conditional_blocks] == ["Psst, over here.", "Move along."]
    assert [c.text for c in alley.choices] == ["Buy", "Leave"]
    assert alley.choices[0].conditions == gold_check
    assert alley.choices[1].conditions is None
    assert export_yarn(imported) == export_yarn(tree)


def test_conditional_blocks_round_trip():
    blocks = [
        ConditionalBlock(
            id="b0",
            type=BlockType.IF,
            condition=[Condition(flag="reputation", operator=ConditionOperator.GREATER_THAN, value=10)],
            content="Good to see you.",
            speaker="Mayor",
        ),
        ConditionalBlock(
            id="b1",
            type=BlockType.ELSEIF,
            condition=[Condition(flag="banned", operator=ConditionOperator.IS_NOT_SET)],
            content="Hm.",
            speaker="Mayor",
            next_node_id="lobby",
        ),
        ConditionalBlock(id="b2", type=BlockType.ELSE, content="Guards!", speaker="Mayor", next_node_id="jail"),
    ]
    tree = DialogueTree(
        id="t",
        title="T",
        start_node_id="hall",
        nodes={"hall": NpcNode(id="hall", conditional_blocks=blocks, next_node_id="lobby")},
    )
    hall = _round_trip(tree).nodes["hall"]
    assert [b.type for b in hall.conditional_blocks] == [BlockType.IF, BlockType.ELSEIF, BlockType.ELSE]
    assert [b.condition for b in hall.conditional_blocks] == [b.condition for b in blocks]
    assert [b.content for b in hall.conditional_blocks] == ["Good to see you.", "Hm.", "Guards!"]
    assert [b.next_node_id for b in hall.conditional_blocks] == [None, "lobby", "jail"]
    assert hall.next_node_id == "lobby"


def test_set_flags_round_trip():
    tree = DialogueTree(
        id="t",
        title="T",
        start_node_id="a",
        nodes={"a": NpcNode(id="a", content="Noted.", set_flags=["met", "talked"])},
    )
    assert _round_trip(tree).nodes["a"].set_flags == ["met", "talked"]


def test_condition_text_survives_round_trip():
    """`$reputation > 10` comes back out exactly as written."""
    script = "title: a\n---\n<<if $reputation > 10>>\n-> Ask for a favour\n<<endif>>\n===\n"
    exported = export_yarn(import_yarn(script).tree)
    assert "<<if $reputation > 10>>" in exported


def test_empty_round_trip():
    assert export_yarn(import_yarn("").tree) == ""


def test_export_is_stable(merchant_tree):
    """Exporting a re-imported export gives the same text."""
    first = export_yarn(merchant_tree)
    second = export_yarn(import_yarn(first, title=merchant_tree.title).tree)
    assert first == second


@pytest.mark.parametrize("script", [
    "title: a\n---\nNarrator: Rain.\nGuard: Halt!\n<<set $wet = true>>\n<<jump b>>\n===\ntitle: b\n---\nEnd.\n===\n",
    "title: a\n---\n-> Yes <<if $x and not $y>>\n    <<set $z to 3>>\n-> No\n===\n",
    "title: a\n---\n<<if $a>>\nA\n<<set $n += 1>>\n<<endif>>\n<<if $b>>\n<<jump b>>\n<<endif>>\n===\n",
    "title: a\n---\nHi\n<<wait 2>>\n-> Go\n    <<jump a>>\n===\n",
    "title: a\n---\n<<if $rich>>\n-> Buy\n<<else>>\n-> Beg\n<<endif>>\n===\n",
])
def test_export_is_stable_for_scripts(script):
    tree = import_yarn(script).tree
    first = export_yarn(tree)
    assert export_yarn(import_yarn(first).tree) == first


def test_import_yields_only_npc_and_player(merchant_tree):
    assert {node.type for node in merchant_tree.nodes.values()} == {"npc", "player"}
