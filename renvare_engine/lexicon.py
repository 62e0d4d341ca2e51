"""
Allergen, diet and product-quality keyword tables.

Defines the 14 EU allergen groups keyed by their Norwegian code, with Norwegian
and English labels, aliases used by the app settings screen, and the keyword
sets that are searched for (as substrings) in Norwegian ingredient lists. Also
holds diet rules and the ordered brand/keyword tables used for organic,
animal-welfare and local-food detection. Every table is ordered: the first
matching entry wins.
"""

from __future__ import annotations

import unicodedata
from typing import Dict, List, Optional, Tuple

ALLERGENS: Dict[str, Dict[str, object]] = {
    "gluten": {
        "no": "Gluten",
        "en": "Cereals containing gluten",
        "aliases": ["gluten"],
        "keywords": [
            "hvete", "rug", "bygg", "havre", "spelt", "gluten", "mel", "semule",
            "durumhvete", "seitan", "couscous", "bulgur", "kamut", "emmer",
        ],
    },
    "melk": {
        "no": "Melk",
        "en": "Milk and dairy products including lactose",
        "aliases": ["milk", "dairy", "mjølk"],
        "keywords": [
            "melk", "laktose", "fløte", "smør", "ost", "kasein", "myse", "kremfløte",
            "rømme", "yoghurt", "helmelk", "lettmelk", "skummetmelk", "kondensert melk",
            "tørrmelk", "melkepulver", "melkefett", "melkeprotein", "valle", "kesam",
            "kremost",
        ],
    },
    "egg": {
        "no": "Egg",
        "en": "Eggs and products thereof",
        "aliases": ["eggs", "egg"],
        "keywords": [
            "egg", "eggehvite", "eggeplomme", "majonese", "eggemasse", "eggepulver",
            "pasteurisert egg", "aioli",
        ],
    },
    "nøtter": {
        "no": "Nøtter",
        "en": "Tree nuts",
        "aliases": ["nuts", "tree_nuts", "tree nuts", "nøtt"],
        "keywords": [
            "mandel", "hasselnøtt", "valnøtt", "cashew", "pistasjnøtt", "pekannøtt",
            "macadamia", "nøtter", "paranøtt", "mandelmel", "nøtteolje",
        ],
    },
    "peanøtter": {
        "no": "Peanøtter",
        "en": "Peanuts and products thereof",
        "aliases": ["peanut", "peanuts", "peanøtt", "jordnøtter"],
        "keywords": [
            "peanøtt", "peanøtter", "jordnøtt", "jordnøtter", "peanøttolje", "peanøttsmør",
        ],
    },
    "skalldyr": {
        "no": "Skalldyr",
        "en": "Crustaceans and products thereof",
        "aliases": ["crustaceans", "shellfish", "krepsdyr"],
        "keywords": [
            "reke", "reker", "krabbe", "hummer", "skjell", "østers", "sjøkreps", "scampi",
            "krepsdyr", "languster", "langustiner", "langustin", "crevettes", "sjøkrebs",
            "krabbekjøtt", "krabbeklør", "hummerkjøtt", "rekekjøtt",
            "rekesalat", "rekefett", "rekepulver", "rekebuljong", "rekeolje",
            "skalldyrbuljong", "skalldyrekstrakt", "skalldyrprotein", "skalldyrpulver",
            "kreps", "ferskvannskreps", "signalkreps", "taskekrabbe", "trollkrabbe",
            "kongekrabbe",
        ],
    },
    "fisk": {
        "no": "Fisk",
        "en": "Fish and products thereof",
        "aliases": ["fish"],
        "keywords": [
            "fisk", "torsk", "laks", "makrell", "sild", "sei", "hyse", "kveite", "ørret",
            "sardiner", "ansjos", "tunfisk", "steinbit", "breiflabb", "fiskegelatin",
            "fiskeolje", "kaviar", "rogn",
        ],
    },
    "soya": {
        "no": "Soya",
        "en": "Soybeans and products thereof",
        "aliases": ["soy", "soya", "soybeans"],
        "keywords": [
            "soya", "soyabønne", "soyaprotein", "soyaolje", "soyalecitin", "tofu", "miso",
            "tempeh", "edamame", "soyasaus",
        ],
    },
    "sesam": {
        "no": "Sesam",
        "en": "Sesame seeds and products thereof",
        "aliases": ["sesame"],
        "keywords": ["sesam", "sesamfrø", "sesamolje", "tahini", "gomashio"],
    },
    "selleri": {
        "no": "Selleri",
        "en": "Celery and products thereof",
        "aliases": ["celery"],
        "keywords": ["selleri", "sellerisalt", "selleristang", "sellerirot", "knollselleri"],
    },
    "sennep": {
        "no": "Sennep",
        "en": "Mustard and products thereof",
        "aliases": ["mustard"],
        "keywords": ["sennep", "sennepsfrø", "sennepspulver", "dijonsennep"],
    },
    "lupin": {
        "no": "Lupin",
        "en": "Lupin and products thereof",
        "aliases": ["lupine"],
        "keywords": ["lupin", "lupinfrø", "lupinmel", "lupinprotein"],
    },
    "bløtdyr": {
        "no": "Bløtdyr",
        "en": "Molluscs and products thereof",
        "aliases": ["molluscs", "mollusks"],
        "keywords": [
            "blekksprut", "blåskjell", "muslinger", "snegler", "kamskjell",
            "akkar", "calamari", "squid", "blekksprutringer", "sepia",
            "åttearmet blekksprut", "hjerteskjell", "sandskjell", "østersskjell",
            "grønnleppet musling", "hjertemusling", "daggarskjell", "strandsnegl",
            "sjøsnegle", "albusnegl", "bløtdyrprotein", "bløtdyrekstrakt", "muslingsaus",
            "østerssaus",
        ],
    },
    "sulfitt": {
        "no": "Sulfitt",
        "en": "Sulphur dioxide and sulphites",
        "aliases": ["sulphites", "sulfites", "sulfitter"],
        "keywords": [
            "sulfitt", "svoveldioksid", "e220", "e221", "e222", "e223", "e224", "e225",
            "e226", "e227", "e228",
        ],
    },
}


def _fold(text: str) -> str:
    """Lowercase, strip accents, and trim whitespace."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


def _build_synonym_mapping(allergens: Dict[str, Dict[str, object]]) -> Dict[str, str]:
    """Map any synonym (code, label, alias) to the canonical allergen code."""
    mapping: Dict[str, str] = {}
    for code, meta in allergens.items():
        mapping[_fold(code)] = code
        for lang in ("no", "en"):
            mapping.setdefault(_fold(str(meta[lang])), code)
        for alias in meta.get("aliases", []):
            mapping.setdefault(_fold(alias), code)
    return mapping


# Any folded synonym -> canonical code
SYNONYM_TO_CODE: Dict[str, str] = _build_synonym_mapping(ALLERGENS)

# Intolerances narrower than their allergen group: lactose is not all of
# "melk" and wheat is not all of "gluten".
NARROW_ALLERGY_KEYWORDS: Dict[str, List[str]] = {
    "laktose": ["laktose", "lactose"],
    "lactose": ["laktose", "lactose"],
    "hvete": ["hvete", "wheat", "spelt", "kamut", "emmer"],
    "wheat": ["hvete", "wheat", "spelt", "kamut", "emmer"],
}


def resolve_allergen_code(user_input: str) -> Optional[str]:
    """
    Resolve free-form allergen text (Norwegian or English) to a canonical code.
    Returns None if we cannot map it.
    """
    return SYNONYM_TO_CODE.get(_fold(user_input))


def allergen_keywords(allergy: str) -> List[str]:
    """Keyword set for an allergy; unknown allergies match on their own name."""
    narrow = NARROW_ALLERGY_KEYWORDS.get(_fold(allergy))
    if narrow is not None:
        return list(narrow)
    code = resolve_allergen_code(allergy)
    if code is None:
        return [allergy.lower().strip()]
    return list(ALLERGENS[code]["keywords"])


def allergen_label(code: str, lang: str = "no") -> str:
    """
    Return a human-friendly allergen label in the requested language,
    defaulting to Norwegian.
    """
    if not code:
        return ""
    canonical = resolve_allergen_code(code)
    meta = ALLERGENS.get(canonical or "")
    if not meta:
        return code
    return str(meta.get(lang) or meta.get("no") or code)


DIET_RULES: Dict[str, Dict[str, List[str]]] = {
    "vegan": {
        "forbidden": [
            "melk", "egg", "kjøtt", "fisk", "honning", "gelatin", "smør", "ost", "fløte",
            "myse", "kasein", "laktose", "yoghurt", "rømme", "kylling", "svin", "storfe",
            "lam", "reke", "laks",
        ],
        "positive": ["vegansk", "vegan", "plantebasert", "plant-based"],
    },
    "vegetar": {
        "forbidden": [
            "kjøtt", "fisk", "gelatin", "kylling", "svin", "storfe", "lam", "reke", "laks",
            "torsk", "sei", "bacon", "skinke",
        ],
        "positive": ["vegetar", "vegetarisk"],
    },
    "pescetarianer": {
        "forbidden": ["kjøtt", "svin", "kylling", "storfe", "lam", "bacon", "skinke"],
        "positive": ["fisk", "sjømat", "laks", "torsk"],
    },
    "glutenfri": {
        "forbidden": ["gluten", "hvete", "rug", "bygg", "spelt", "semule", "durumhvete"],
        "positive": ["glutenfri", "gluten-free", "uten gluten"],
    },
    "laktosefri": {
        "forbidden": ["laktose"],
        "positive": ["laktosefri", "lactose-free", "uten laktose"],
    },
    "lavkarbo": {
        "forbidden": [],
        "positive": ["lavkarbo", "low-carb", "keto"],
    },
    "paleo": {
        "forbidden": ["sukker", "mel", "korn", "bønner", "linser", "peanøtt"],
        "positive": ["paleo"],
    },
}

DIET_ALIASES: Dict[str, str] = {
    "veganer": "vegan",
    "vegetarian": "vegetar",
    "vegetarianer": "vegetar",
    "pescetarian": "pescetarianer",
    "gluten_free": "glutenfri",
    "gluten-free": "glutenfri",
    "lactose_free": "laktosefri",
    "lactose-free": "laktosefri",
    "low_carb": "lavkarbo",
    "low-carb": "lavkarbo",
    "keto": "lavkarbo",
}


def resolve_diet(name: str) -> Optional[str]:
    """Canonical diet key, or None when no rule set is registered for it."""
    key = (name or "").lower().strip()
    key = DIET_ALIASES.get(key, key)
    return key if key in DIET_RULES else None


ORGANIC_KEYWORDS: Tuple[str, ...] = ("økologisk", "organic", "øko", "bio")

# (keywords, label) pairs; high welfare = Dyrevernmerket, Debio and premium brands.
ANIMAL_WELFARE_BRANDS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("hovelsrud",), "Dyrevernmerket"),
    (("jerseymeieriet",), "Dyrevernmerket"),
    (("kolonihagen",), "Dyrevernmerket"),
    (("heinrichjung", "heinrich jung"), "Dyrevernmerket"),
    (("grøndalen",), "Dyrevernmerket"),
    (("nýr",), "Dyrevernmerket"),
    (("norsk ullgris", "ullgris"), "Dyrevernmerket"),
    (("rørosmeieriet",), "Dyrevernmerket"),
    (("homlagarden",), "Dyrevernmerket"),
    (("tine setermjølk", "setermjølk"), "Setermelk"),
    (("debio",), "Debio-sertifisert"),
    (("eu økologisk", "eu-økologisk"), "EU Økologisk"),
    (("demeter",), "Demeter Biodynamisk"),
    (("stolt fjørfe", "stoltfjørfe"), "Stolt Fjørfe"),
    (("hubbard kylling", "hubbard"), "Stolt Fjørfe"),
    (("liveche",), "Stolt Fjørfe"),
    (("grønne skoger gård", "grønne skoger"), "Småskala gård"),
    (("hokksund egg",), "Frittgående høner"),
    (("birkebeiner egg", "birkebeiner"), "Frittgående høner"),
    (("holte gård",), "Småskala gård"),
    (("sørby gård",), "Småskala gård"),
    (("kviberg gård",), "Småskala gård"),
    (("heimdal gård",), "Småskala gård"),
    (("stangeskovene",), "Viltkjøtt"),
    (("trøndermat",), "Regional kvalitet"),
    (("nortura prior", "prior"), "Prior"),
    (("brunost seter", "seterost"), "Setermjølk"),
    (("valdresmeieriet",), "Regional meieri"),
    (("hanen merket", "hanen-merket"), "Hanen-merket"),
    (("norsk gardsost",), "Gardsmeieri"),
    (("ostegården",), "Gardsmeieri"),
    (("villsvin",), "Viltkjøtt"),
    (("elgkjøtt", "elg"), "Viltkjøtt"),
    (("reinsdyrkjøtt", "rein"), "Viltkjøtt"),
    (("hjortekjøtt", "hjort"), "Viltkjøtt"),
    (("lofotlam", "lofot lam"), "Utegangerlam"),
    (("gammalnorsk spælsau", "spælsau"), "Urfe"),
    (("villsau",), "Villsau"),
)

ANIMAL_WELFARE_MEDIUM: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("økologisk", "organic", "øko"), "Økologisk"),
    (("frittgående", "free range"), "Frittgående"),
    (("frilandsegg", "friland"), "Frilandsegg"),
    (("grasfôret", "grass fed", "gressfôret"), "Grasfôret"),
    (("utegående",), "Utegående"),
    (("bærekraftig", "sustainable"), "Bærekraftig"),
    (("msc sertifisert", "msc-sertifisert", "msc"), "MSC Sertifisert"),
    (("asc sertifisert", "asc-sertifisert", "asc"), "ASC Sertifisert"),
    (("utemarksbeite", "beite"), "Beitebasert"),
    (("løsdrift",), "Løsdrift"),
    (("saktevoksende",), "Saktevoksende"),
    (("naturlig fôr",), "Naturlig fôr"),
    (("gmo-fri", "uten gmo"), "GMO-fri"),
    (("nyt norge", "nyt-norge"), "Nyt Norge"),
    (("spesialitet",), "Spesialitet"),
    (("tradisjonelt",), "Tradisjonelt"),
    (("kortreist",), "Kortreist"),
    (("småskala",), "Småskala"),
)

ANIMAL_PRODUCT_KEYWORDS: Tuple[str, ...] = (
    "melk", "ost", "egg", "kjøtt", "kylling", "svin", "storfe", "lam", "fløte",
    "smør", "yoghurt", "rømme",
)

# Norwegian producers, certifications and regional brands.
LOCAL_FOOD_HIGH: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("nyt norge", "nyt-norge"), "Nyt Norge"),
    (("spesialitet.no", "spesialitet"), "Beskyttet betegnelse"),
    (("hanen merket", "hanen-merket", "hanen"), "Hanen-merket"),
    (("tine",), "Norsk meieri"),
    (("nortura",), "Norsk kjøtt"),
    (("gilde",), "Norsk kjøtt"),
    (("prior",), "Norsk fjørfe"),
    (("synnøve finden", "synnøve"), "Norsk meieri"),
    (("fjordland",), "Norsk mat"),
    (("lerøy",), "Norsk sjømat"),
    (("mowi",), "Norsk sjømat"),
    (("salmar",), "Norsk sjømat"),
    (("bama",), "Norsk frukt/grønt"),
    (("gartnerhallen",), "Norsk grønt"),
    (("rørosmeieriet",), "Trøndelag"),
    (("valdresmeieriet",), "Valdres"),
    (("jerseymeieriet",), "Vestlandet"),
    (("gausdalsmeieriet",), "Gudbrandsdalen"),
    (("jæren meieri",), "Jæren"),
    (("q-meieriene", "q meieriene"), "Norsk meieri"),
    (("trøndermat",), "Trøndelag"),
    (("lofotlam",), "Lofoten"),
    (("ryafeet",), "Trøndelag"),
    (("nordfjordkjøtt",), "Nordfjord"),
    (("hardanger kjøtt",), "Hardanger"),
    (("jæren kjøtt",), "Jæren"),
    (("idsøe",), "Rogaland"),
    (("fatland",), "Vestlandet"),
    (("olden",), "Nordfjord"),
    (("imsdal",), "Norsk vann"),
    (("farris",), "Larvik"),
    (("aass",), "Drammen"),
    (("hansa",), "Bergen"),
    (("ringnes",), "Oslo"),
    (("mack",), "Tromsø"),
    (("grans",), "Sandefjord"),
    (("stabburet",), "Norsk mat"),
    (("idun",), "Norsk mat"),
    (("orkla",), "Norsk mat"),
    (("kavli",), "Norsk mat"),
    (("mills",), "Norsk mat"),
    (("freia",), "Norsk sjokolade"),
    (("nidar",), "Trondheim"),
    (("domstein",), "Norsk sjømat"),
    (("norway seafoods",), "Norsk sjømat"),
    (("brødrene sperre",), "Norsk sjømat"),
    (("king oscar",), "Norsk sjømat"),
    (("lofoten",), "Lofoten"),
    (("vesterålen",), "Vesterålen"),
    (("finnmark",), "Finnmark"),
    (("møllerens",), "Norsk mel"),
    (("regal",), "Norsk bakst"),
    (("hatting",), "Norsk bakst"),
    (("mesterbakeren",), "Norsk bakst"),
    (("bakehuset",), "Norsk bakst"),
)

LOCAL_FOOD_MEDIUM: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("norsk", "norwegian"), "Norsk opprinnelse"),
    (("made in norway", "laget i norge"), "Produsert i Norge"),
    (("kortreist",), "Kortreist"),
    (("lokal", "lokalt"), "Lokal"),
    (("tradisjonell norsk",), "Tradisjonell"),
    (("trøndelag", "trøndersk"), "Trøndelag"),
    (("vestland", "vestlandsk"), "Vestlandet"),
    (("nordland", "nordnorsk"), "Nord-Norge"),
    (("østland", "østlandsk"), "Østlandet"),
    (("sørlandet", "sørlandsk"), "Sørlandet"),
    (("telemark",), "Telemark"),
    (("hedmark",), "Hedmark"),
    (("oppland",), "Oppland"),
    (("rogaland",), "Rogaland"),
    (("hordaland",), "Hordaland"),
    (("sogn og fjordane", "sogn"), "Sogn og Fjordane"),
    (("møre og romsdal", "møre"), "Møre og Romsdal"),
    (("troms",), "Troms"),
    (("finnmark",), "Finnmark"),
    (("hardangereple",), "Hardanger"),
    (("ringerikserts",), "Ringerike"),
    (("suldalsrøyra",), "Suldal"),
    (("tørrfisk fra lofoten",), "Lofoten"),
    (("fenalår fra norge",), "Norsk fenalår"),
    (("klippfisk",), "Norsk klippfisk"),
    (("rakfisk",), "Norsk tradisjon"),
    (("lutefisk",), "Norsk tradisjon"),
    (("pinnekjøtt",), "Norsk tradisjon"),
    (("smalahove",), "Vestlandsk tradisjon"),
    (("gårdsmeieri", "gardsmeieri"), "Gårdsmeieri"),
    (("gårdsost", "gardsost"), "Gårdsost"),
    (("småskala",), "Småskala"),
    (("håndlaget",), "Håndlaget"),
    (("hjemmelaget",), "Hjemmelaget"),
)

# Additive classes that disqualify a product from being "renvare" (clean food).
RENVARE_HARMFUL_TERMS: Tuple[str, ...] = (
    "konserveringsmiddel",
    "farge",
    "aroma",
    "stabilisator",
    "emulgator",
    "antioksidant",
    "sødestoff",
    "forsterkningsstoff",
)
