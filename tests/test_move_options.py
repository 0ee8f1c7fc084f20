from calcdex.services.move_options import build_move_options


def labels(groups):
    return [g.label for g in groups]


def names(groups, label):
    return [o.value for g in groups if g.label == label for o in g.options]


def test_no_combatant_no_options(dex):
    assert build_move_options("gen9ou", None, dex) == []


def test_groups_in_order_without_duplicates(dex, make_combatant):
    c = make_combatant(revealed_moves=["Salt Cure"], alt_moves=[["Protect", 0.9], ["Recover", 0.95], ["Salt Cure", 0.5]])
    groups = build_move_options("gen9ou", c, dex)
    assert labels(groups) == ["Revealed", "Pool", "Learnset", "Hidden Power"]
    assert names(groups, "Revealed") == ["Salt Cure"]
    assert names(groups, "Pool") == ["Protect", "Recover"]
    assert names(groups, "Learnset") == ["Body Press", "Stealth Rock"]
    assert groups[1].options[0].right_label == "90.00%"

    everything = [o.value for g in groups for o in g.options]
    assert len(everything) == len(set(everything))


def test_unlocked_format_shows_all_moves(dex, make_combatant):
    groups = build_move_options("gen9nationaldex", make_combatant(), dex)
    assert "All" in labels(groups)
    assert "Tackle" in names(groups, "All")
    assert "Salt Cure" not in names(groups, "All")
    assert labels(groups)[-1] == "Hidden Power"


def test_transformed_group_comes_first(dex, make_combatant):
    ditto = make_combatant(
        "Ditto", server_sourced=True, server_moves=["Transform"],
        transformed_forme="Garganacl", transformed_moves=["Salt Cure", "Protect"],
    )
    groups = build_move_options("gen9ou", ditto, dex)
    assert labels(groups)[:2] == ["Transformed", "Pre-Transform"]
    # el learnset de la forma copiada también cuenta
    assert "Body Press" in names(groups, "Learnset")


def test_gen1_has_no_hidden_power(dex, make_combatant):
    assert "Hidden Power" not in labels(build_move_options("gen1ou", make_combatant(), dex))


def test_pool_without_usage_is_alphabetical(dex, make_combatant):
    c = make_combatant(alt_moves=["Stealth Rock", "Body Press"])
    assert names(build_move_options("gen9ou", c, dex), "Pool") == ["Body Press", "Stealth Rock"]


def test_all_group_leads_when_there_is_no_hidden_power(dex, make_combatant):
    groups = build_move_options("gen1nationaldex", make_combatant(), dex)
    assert labels(groups)[0] == "All"
    assert labels(groups) == ["All", "Learnset"]
