import json

import pandas as pd

import main


def test_classify_text_output(capsys):
    assert main.main(["classify", "--ingredients", "sukker, emulgator"]) == 0
    out = capsys.readouterr().out
    assert "NOVA-gruppe: 4" in out
    assert "Emulgator" in out


def test_classify_json_output(capsys):
    main.main(["--format", "json", "classify", "--ingredients", "tomater, salt", "--additives", "E330"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["nova_group"] == 3
    assert payload["debug"]["e_numbers"] == ["E330"]


def test_classify_without_ingredients_reports_estimate(capsys):
    main.main(["--lang", "en", "classify", "--ingredients", "", "--category", "pizza"])
    out = capsys.readouterr().out
    assert "NOVA group: 4 (estimated from category)" in out


def test_match_output(capsys):
    main.main(
        [
            "--format",
            "json",
            "match",
            "--name",
            "Vegansk sjokolade",
            "--ingredients",
            "sukker, kakaosmør, hasselnøtter",
            "--allergies",
            "nøtter,melk",
            "--diets",
            "vegan",
        ]
    )
    payload = json.loads(capsys.readouterr().out)
    assert payload["allergy_warnings"] == ["nøtter", "melk"]
    assert payload["diet_matches"] == ["vegan"]


def test_match_text_uses_translations(capsys):
    main.main(["--lang", "en", "match", "--name", "Lettmelk", "--brand", "Tine", "--local-food"])
    out = capsys.readouterr().out
    assert "Local food: yes (Norsk meieri)" in out
    assert "Allergy warnings: none" in out


def test_categorize(capsys):
    main.main(["categorize", "melk"])
    assert "Meieriprodukter" in capsys.readouterr().out


def test_translation_falls_back_to_english():
    assert main._t("nova_group", "pt") == "NOVA group"
    assert main._t("missing_key", "no") == "missing_key"


def test_classify_csv(tmp_path, capsys):
    source = tmp_path / "products.csv"
    target = tmp_path / "classified.csv"
    pd.DataFrame(
        {
            "name": ["Kjeks", "Eple", "Pizza"],
            "ingredients_text": ["sukker, emulgator", "eple", None],
            "category": ["kjeks", "frukt", "pizza"],
        }
    ).to_csv(source, index=False)

    code = main.main(
        ["classify-csv", str(source), str(target), "--category-column", "category"]
    )

    assert code == 0
    result = pd.read_csv(target)
    assert list(result["name"]) == ["Kjeks", "Eple", "Pizza"]
    assert list(result["nova_group"]) == [4, 2, 4]
    assert list(result["is_estimated"]) == [False, False, True]
    assert "3" in capsys.readouterr().out


def test_classify_csv_missing_column(tmp_path, capsys):
    source = tmp_path / "products.csv"
    pd.DataFrame({"name": ["Kjeks"]}).to_csv(source, index=False)

    code = main.main(["classify-csv", str(source), str(tmp_path / "out.csv")])

    assert code == 2
    assert "ingredients_text" in capsys.readouterr().err
