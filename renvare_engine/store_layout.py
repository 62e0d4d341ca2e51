"""
Store-layout bucketing for shopping lists.

Categories follow the usual walk through a Norwegian grocery store (Rema 1000,
Kiwi, Coop, Meny). A product lands in the first category, in list order, with
a keyword contained in its search text, so list order settles any overlap
("makrell" is Ost og pålegg, not Fisk og sjømat).
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from .models import CategoryAssignment
from .text import normalize_query

T = TypeVar("T")

STORE_LAYOUT: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    (
        "Frukt og grønt",
        "🍎",
        (
            "eple", "banan", "appelsin", "sitron", "druer", "melon", "mango", "avokado",
            "kiwi", "pære", "plomme", "nektarin", "fersken", "bringebær", "blåbær", "jordbær",
            "tomat", "agurk", "paprika", "løk", "hvitløk", "gulrot", "brokkoli", "blomkål",
            "spinat", "salat", "rucola", "potet", "sopp", "squash", "aubergine", "selleri",
            "grønnkål", "rosenkål", "asparges", "mais", "erter", "bønner", "linser",
            "frukt", "grønt", "grønnsak", "bær", "sitrus",
        ),
    ),
    (
        "Brød og bakervarer",
        "🥖",
        (
            "brød", "loff", "rundstykke", "boller", "croissant", "knekkebrød", "flatbrød",
            "lomper", "lefser", "kake", "wienerbrød", "bagel", "focaccia", "ciabatta",
            "baguette", "polarbrød", "pita", "tortilla", "wraps", "hvetemel", "rugbrød",
            "grovbrød", "kneipp", "muffins", "scones", "kjeks",
        ),
    ),
    (
        "Meieriprodukter",
        "🥛",
        (
            "melk", "mjølk", "fløte", "rømme", "yoghurt", "skyr", "kesam", "cottage",
            "smør", "margarin", "egg", "eggerøre", "kremfløte", "matfløte", "lettmelk",
            "helmelk", "havremelk", "soyamelk", "mandelmelk", "kulturmelk", "kefir",
            "riskrem", "pudding", "vaniljesaus",
        ),
    ),
    (
        "Ost og pålegg",
        "🧀",
        (
            "ost", "brunost", "gulost", "hvitost", "norvegia", "jarlsberg", "brie", "camembert",
            "mozzarella", "parmesan", "feta", "cheddar", "kremost", "smøreost", "philadelphia",
            "skinke", "salami", "leverpostei", "makrell", "kaviar", "majones", "syltetøy",
            "sjokoladepålegg", "nugatti", "peanøttsmør", "honning", "pålegg",
        ),
    ),
    (
        "Kjøtt og ferskvare",
        "🥩",
        (
            "kylling", "kyllingfilet", "kyllinglår", "kalkun", "and", "svin", "svinekjøtt",
            "svinekoteletter", "bacon", "pølse", "wiener", "grillpølse", "kjøttdeig",
            "karbonade", "biff", "entrecote", "mørbrad", "indrefilet", "roastbiff", "ribbe",
            "lam", "lammekjøtt", "kjøttkaker", "medisterkaker", "farsbrød", "okse", "storfe",
        ),
    ),
    (
        "Fisk og sjømat",
        "🐟",
        (
            "laks", "laksefilet", "ørret", "torsk", "torskefilet", "sei", "hyse", "makrell",
            "sild", "reker", "scampi", "blåskjell", "krabbe", "hummer", "fiskekaker",
            "fiskepudding", "fiskeboller", "fiskepinner", "fish & chips", "sushi",
            "sjømat", "fisk",
        ),
    ),
    (
        "Hermetikk og konserver",
        "🥫",
        (
            "hermetikk", "boks", "konserv", "tunfisk", "makrell i tomat", "sardiner",
            "leverpostei", "tomater", "tomatpuré", "mais", "bønner", "kikerter", "linser",
            "suppe", "ferdigsuppe", "gryte", "ravioli", "spaghetti i boks",
        ),
    ),
    (
        "Pasta, ris og korn",
        "🍝",
        (
            "pasta", "spaghetti", "penne", "fusilli", "makaroni", "lasagneplater", "nudler",
            "ris", "basmati", "jasminris", "fullkornsris", "risotto", "couscous", "bulgur",
            "quinoa", "havregryn", "kornblanding", "müsli", "granola", "grøt", "byggryn",
        ),
    ),
    (
        "Sauser og krydder",
        "🧂",
        (
            "saus", "ketchup", "sennep", "majones", "dressing", "pesto", "pastasaus",
            "taco", "salsa", "soyasaus", "teriyaki", "sriracha", "tabasco", "bbq",
            "krydder", "salt", "pepper", "paprika", "oregano", "basilikum", "timian",
            "karri", "gurkemeie", "kanel", "ingefær", "hvitløkspulver", "buljong",
        ),
    ),
    (
        "Baking",
        "🎂",
        (
            "mel", "hvetemel", "grovmel", "sukker", "melis", "vaniljesukker", "bakepulver",
            "natron", "gjær", "kakao", "sjokolade", "kokesjokolade", "mandler", "nøtter",
            "rosiner", "marsipan", "glasur", "marzipan", "valnøtter", "hasselnøtter",
        ),
    ),
    (
        "Snacks og godteri",
        "🍫",
        (
            "chips", "popcorn", "nøtter", "snacks", "sjokolade", "kvikk lunsj", "daim",
            "smash", "twist", "non-stop", "seigmenn", "lakris", "tyggegummi", "drops",
            "kjeks", "cookies", "vafler", "is", "godteri", "smågodt",
        ),
    ),
    (
        "Drikkevarer",
        "🥤",
        (
            "brus", "cola", "fanta", "sprite", "pepsi", "solo", "juice", "appelsinjuice",
            "eplejuice", "smoothie", "vann", "mineralvann", "farris", "saft", "kaffe",
            "te", "kakao", "energidrikk", "redbull", "monster", "øl", "vin", "drikke",
        ),
    ),
    (
        "Frysevarer",
        "❄️",
        (
            "frys", "frosne", "frossen", "frossent", "fryse", "is", "iskrem", "pizza",
            "frossenpizza", "pommes frites", "pølser", "kjøttboller", "fiskepinner",
            "lasagne", "pytt i panne", "grønnsaksblanding", "bær", "grønnsaker",
        ),
    ),
)

OTHER_CATEGORY = "Annet"
OTHER_EMOJI = "📦"


def categorize_product(
    search_query: str,
    product_name: Optional[str] = None,
    product_brand: Optional[str] = None,
) -> CategoryAssignment:
    search_text = normalize_query(" ".join([search_query or "", product_name or "", product_brand or ""]))
    for index, (category, emoji, keywords) in enumerate(STORE_LAYOUT):
        if any(keyword in search_text for keyword in keywords):
            return CategoryAssignment(category=category, emoji=emoji, sort_order=index)
    return CategoryAssignment(
        category=OTHER_CATEGORY, emoji=OTHER_EMOJI, sort_order=len(STORE_LAYOUT)
    )


def group_items_by_category(
    items: Sequence[T],
    name_of: Callable[[T], str],
    product_lookup: Optional[Callable[[T], Optional[Dict[str, str]]]] = None,
) -> List[Dict[str, object]]:
    """
    Group shopping-list items into store-walk order:
    [{"category", "emoji", "items"}]. Items keep their list order inside a
    group. product_lookup may return {"name", "brand"} of a chosen product.
    """
    categorized = []
    for item in items:
        info = product_lookup(item) if product_lookup else None
        info = info or {}
        assignment = categorize_product(name_of(item), info.get("name"), info.get("brand"))
        categorized.append((assignment, item))

    categorized.sort(key=lambda pair: pair[0].sort_order)

    groups: List[Dict[str, object]] = []
    for assignment, item in categorized:
        if groups and groups[-1]["category"] == assignment.category:
            groups[-1]["items"].append(item)
        else:
            groups.append(
                {"category": assignment.category, "emoji": assignment.emoji, "items": [item]}
            )
    return groups
