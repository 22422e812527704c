"""
Beauty Keyword Lexicon
======================

Weighted keyword dictionary used by the deterministic keyword analyzer.

Each category maps to a list of (term, weight, canonical) entries; sentiment
entries carry a polarity as well. Terms are matched case-insensitively as
substrings of review text. ``canonical`` is the English form used for
hashtags when the term itself is Korean.

Weights:
    1.2 - trend / next-generation terms (high signal)
    1.0 - standard vocabulary
    0.8 - generic or ambiguous terms
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

CATEGORY_LABELS: Dict[str, Dict[str, str]] = {
    "texture": {"ko": "제형", "en": "Texture"},
    "ingredients": {"ko": "성분", "en": "Ingredients"},
    "effects": {"ko": "효과", "en": "Effects"},
    "scent": {"ko": "향", "en": "Scent"},
    "usage_feel": {"ko": "사용감", "en": "Usage Feel"},
    "target": {"ko": "추천 대상", "en": "Recommended For"},
    "sentiment": {"ko": "평가", "en": "Reviews"},
}

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"


# =============================================================================
# ATTRIBUTE CATEGORIES: (term, weight, canonical)
# =============================================================================

_TEXTURE: List[Tuple[str, float, Optional[str]]] = [
    ("크림", 1.0, "cream"), ("젤", 1.0, "gel"), ("로션", 1.0, "lotion"),
    ("세럼", 1.0, "serum"), ("에센스", 1.0, "essence"), ("오일", 1.0, "oil"),
    ("워터", 1.0, "water"), ("폼", 1.0, "foam"), ("밤", 1.0, "balm"),
    ("파우더", 1.0, "powder"),
    ("묽은", 0.8, "light"), ("진한", 0.8, "thick"), ("가벼운", 0.8, "lightweight"),
    ("무거운", 0.8, "heavy"), ("부드러운", 0.8, "smooth"), ("쫀쫀한", 0.8, "bouncy"),
    ("촉촉한", 0.8, "hydrating"),
    ("세컨드스킨", 1.2, "second-skin"), ("블러링", 1.2, "blurring"),
    ("립오일", 1.1, "lip oil"), ("립글로스", 1.0, "lip gloss"),
    ("하이브리드", 1.1, "hybrid"), ("쿠션", 1.0, "cushion"),
    ("cream", 1.0, None), ("gel", 1.0, None), ("lotion", 1.0, None),
    ("serum", 1.0, None), ("essence", 1.0, None), ("oil", 1.0, None),
    ("water", 1.0, None), ("foam", 1.0, None), ("balm", 1.0, None),
    ("lightweight", 0.8, None), ("thick", 0.8, None), ("smooth", 0.8, None),
    ("bouncy", 0.8, None),
    ("second-skin", 1.2, None), ("second skin", 1.2, None), ("skin-like", 1.1, None),
    ("blurring", 1.2, None), ("blur", 1.1, None), ("soft-focus", 1.1, None),
    ("soft focus", 1.1, None), ("lip oil", 1.1, None), ("lip gloss", 1.0, None),
    ("lip tint", 1.0, None), ("hybrid makeup", 1.1, None), ("hybrid", 1.0, None),
    ("skincare-makeup", 1.1, None), ("cushion", 1.0, None),
    ("cushion compact", 1.0, None), ("bb cream", 1.0, None), ("cc cream", 1.0, None),
    ("tinted moisturizer", 1.0, None), ("skin tint", 1.0, None),
    ("no-makeup makeup", 1.1, None), ("natural finish", 1.0, None),
    ("matte", 1.0, None), ("dewy finish", 1.1, None), ("satin", 1.0, None),
    ("velvet", 1.0, None), ("glossy", 1.0, None), ("sheer", 1.0, None),
    ("buildable", 1.0, None), ("full coverage", 1.0, None),
    ("light coverage", 1.0, None), ("medium coverage", 1.0, None),
    ("transfer-proof", 1.0, None), ("long-wear", 1.0, None),
    ("long-lasting", 1.0, None), ("waterproof", 1.0, None),
    ("water-resistant", 1.0, None), ("smudge-proof", 1.0, None),
    ("mask-proof", 1.1, None),
]

_INGREDIENTS: List[Tuple[str, float, Optional[str]]] = [
    ("히알루론산", 1.0, "hyaluronic acid"), ("비타민C", 1.0, "vitamin C"),
    ("비타민", 0.8, "vitamin"), ("나이아신아마이드", 1.0, "niacinamide"),
    ("레티놀", 1.0, "retinol"), ("세라마이드", 1.0, "ceramide"),
    ("콜라겐", 1.0, "collagen"), ("펩타이드", 1.0, "peptide"),
    ("AHA", 1.0, "AHA"), ("BHA", 1.0, "BHA"),
    ("살리실산", 1.0, "salicylic acid"), ("글리콜산", 1.0, "glycolic acid"),
    ("티트리", 1.0, "tea tree"), ("알로에", 1.0, "aloe"), ("녹차", 1.0, "green tea"),
    ("센텔라", 1.0, "centella"), ("병풀", 1.0, "centella"), ("마데카", 1.0, "madeca"),
    ("스쿠알란", 1.0, "squalane"), ("프로폴리스", 1.0, "propolis"),
    ("달팽이", 1.0, "snail mucin"),
    ("피디알엔", 1.2, "PDRN"), ("엑소좀", 1.2, "exosomes"),
    ("폴리뉴클레오타이드", 1.2, "polynucleotides"), ("바쿠치올", 1.2, "bakuchiol"),
    ("글루타치온", 1.2, "glutathione"), ("트라넥삼산", 1.2, "tranexamic acid"),
    ("아젤라산", 1.2, "azelaic acid"), ("포스트바이오틱스", 1.2, "postbiotics"),
    ("레스베라트롤", 1.2, "resveratrol"),
    ("hyaluronic", 1.0, None), ("vitamin", 0.8, None), ("niacinamide", 1.0, None),
    ("retinol", 1.0, None), ("ceramide", 1.0, None), ("collagen", 1.0, None),
    ("peptide", 1.0, None), ("centella", 1.0, None), ("squalane", 1.0, None),
    ("propolis", 1.0, None), ("snail", 1.0, None),
    ("pdrn", 1.2, None), ("phyto-pdrn", 1.2, None), ("exosomes", 1.2, None),
    ("exosome", 1.2, None), ("polynucleotides", 1.2, None),
    ("polynucleotide", 1.2, None), ("nmn", 1.2, None), ("nhn", 1.2, None),
    ("ectoin", 1.2, None), ("bakuchiol", 1.2, None), ("egf", 1.2, None),
    ("fgf", 1.2, None), ("postbiotics", 1.2, None), ("postbiotic", 1.2, None),
    ("probiotics", 1.1, None), ("prebiotics", 1.1, None),
    ("glutathione", 1.2, None), ("copper tripeptide", 1.2, None),
    ("copper peptide", 1.2, None), ("ghk-cu", 1.2, None),
    ("tranexamic", 1.2, None), ("tranexamic acid", 1.2, None),
    ("azelaic", 1.2, None), ("azelaic acid", 1.2, None),
    ("pha", 1.1, None), ("lha", 1.1, None), ("resveratrol", 1.2, None),
    ("astaxanthin", 1.2, None), ("fullerene", 1.2, None), ("salmon", 1.1, None),
    ("salmon dna", 1.2, None), ("bifida", 1.1, None), ("galactomyces", 1.1, None),
    ("saccharomyces", 1.1, None), ("ferment", 1.0, None), ("fermented", 1.0, None),
    ("adenosine", 1.1, None), ("allantoin", 1.0, None), ("panthenol", 1.0, None),
    ("mugwort", 1.1, None), ("artemisia", 1.1, None), ("cica", 1.1, None),
    ("madecassoside", 1.1, None), ("beta glucan", 1.1, None),
    ("licorice", 1.0, None), ("arbutin", 1.1, None), ("kojic acid", 1.1, None),
    ("alpha arbutin", 1.1, None),
]

_EFFECTS: List[Tuple[str, float, Optional[str]]] = [
    ("보습", 1.0, "hydrating"), ("수분", 1.0, "moisturizing"),
    ("미백", 1.0, "brightening"), ("브라이트닝", 1.0, "brightening"),
    ("톤업", 1.0, "tone-up"), ("화이트닝", 1.0, "whitening"),
    ("주름", 1.0, "anti-wrinkle"), ("탄력", 1.0, "firming"),
    ("리프팅", 1.0, "lifting"), ("진정", 1.0, "soothing"),
    ("트러블", 1.0, "acne"), ("여드름", 1.0, "acne"), ("모공", 1.0, "pore"),
    ("각질", 1.0, "exfoliating"), ("클렌징", 1.0, "cleansing"),
    ("노화방지", 1.0, "anti-aging"), ("안티에이징", 1.0, "anti-aging"),
    ("재생", 1.0, "regenerating"), ("영양", 0.8, "nourishing"),
    ("윤기", 0.8, "glow"), ("광채", 0.8, "radiance"),
    ("슬로에이징", 1.2, "slow-aging"), ("스키니멀리즘", 1.2, "skinimalism"),
    ("유리피부", 1.2, "glass skin"), ("글래스스킨", 1.2, "glass skin"),
    ("물광", 1.2, "dewy"), ("구름피부", 1.2, "cloud skin"),
    ("장벽케어", 1.2, "barrier care"), ("피부장벽", 1.2, "skin barrier"),
    ("마이크로바이옴", 1.2, "microbiome"),
    ("hydrating", 1.0, None), ("moisturizing", 1.0, None),
    ("brightening", 1.0, None), ("whitening", 1.0, None),
    ("anti-aging", 1.0, None), ("firming", 1.0, None), ("soothing", 1.0, None),
    ("acne", 1.0, None), ("pore", 1.0, None), ("exfoliating", 1.0, None),
    ("glow", 0.8, None), ("radiance", 0.8, None),
    ("slow-aging", 1.2, None), ("slow aging", 1.2, None),
    ("skinimalism", 1.2, None), ("glass skin", 1.2, None),
    ("glass-skin", 1.2, None), ("cloud skin", 1.2, None), ("dewy", 1.1, None),
    ("dewy skin", 1.1, None), ("barrier", 1.1, None), ("barrier care", 1.2, None),
    ("skin barrier", 1.2, None), ("microbiome", 1.2, None),
    ("skin cycling", 1.2, None), ("slugging", 1.1, None),
    ("skin fasting", 1.1, None), ("skip care", 1.1, None),
    ("clean beauty", 1.1, None), ("waterless beauty", 1.1, None),
    ("plumping", 1.0, None), ("plump", 1.0, None), ("bouncy", 1.0, None),
    ("glassy", 1.0, None), ("translucent", 1.0, None), ("poreless", 1.0, None),
    ("lit from within", 1.1, None), ("healthy glow", 1.0, None),
    ("natural glow", 1.0, None), ("luminous", 1.0, None), ("radiant", 1.0, None),
    ("regenerating", 1.0, None), ("nourishing", 1.0, None),
    ("rejuvenating", 1.0, None), ("revitalizing", 1.0, None),
]

_SCENT: List[Tuple[str, float, Optional[str]]] = [
    ("무향", 1.0, "fragrance-free"), ("은은한", 0.8, "subtle"),
    ("향긋한", 0.8, "pleasant"), ("플로럴", 1.0, "floral"),
    ("시트러스", 1.0, "citrus"), ("허브", 1.0, "herbal"), ("민트", 1.0, "mint"),
    ("라벤더", 1.0, "lavender"), ("장미", 1.0, "rose"), ("자스민", 1.0, "jasmine"),
    ("인공향", 0.8, "artificial scent"),
    ("fragrance-free", 1.0, None), ("unscented", 1.0, None), ("floral", 1.0, None),
    ("citrus", 1.0, None), ("herbal", 1.0, None), ("lavender", 1.0, None),
    ("rose", 1.0, None),
]

_USAGE_FEEL: List[Tuple[str, float, Optional[str]]] = [
    ("흡수", 1.0, "absorbs well"), ("빠른흡수", 1.0, "fast absorption"),
    ("끈적임", 0.8, "sticky"), ("끈적이지 않는", 1.0, "non-sticky"),
    ("산뜻한", 1.0, "refreshing"), ("쫀쫀한", 0.8, "bouncy"),
    ("촉촉한", 1.0, "moist"), ("건조함", 0.8, "dry"), ("자극", 0.8, "irritating"),
    ("순한", 1.0, "gentle"), ("저자극", 1.0, "low-irritation"),
    ("민감성", 0.8, "sensitive skin"), ("지성", 0.8, "oily skin"),
    ("건성", 0.8, "dry skin"), ("복합성", 0.8, "combination skin"),
    ("absorbs", 1.0, None), ("sticky", 0.8, None), ("non-sticky", 1.0, None),
    ("refreshing", 1.0, None), ("gentle", 1.0, None), ("sensitive", 0.8, None),
    ("oily", 0.8, None), ("dry", 0.8, None),
]

_TARGET: List[Tuple[str, float, Optional[str]]] = [
    ("민감성", 1.0, "sensitive skin"), ("지성", 1.0, "oily skin"),
    ("건성", 1.0, "dry skin"), ("복합성", 1.0, "combination skin"),
    ("트러블", 1.0, "acne-prone"), ("모든 피부", 1.0, "all skin types"),
    ("남성", 0.8, "men"), ("여성", 0.8, "women"),
    ("20대", 0.8, "20s"), ("30대", 0.8, "30s"), ("40대", 0.8, "40s"), ("50대", 0.8, "50s"),
    ("sensitive", 1.0, None), ("oily", 1.0, None), ("dry", 1.0, None),
    ("combination", 1.0, None), ("acne-prone", 1.0, None), ("all skin", 1.0, None),
]

# =============================================================================
# SENTIMENT: (term, weight, polarity, canonical)
# =============================================================================

_SENTIMENT: List[Tuple[str, float, str, Optional[str]]] = [
    ("좋아요", 1.0, POSITIVE, "love it"), ("최고", 1.0, POSITIVE, "best"),
    ("강추", 1.0, POSITIVE, "highly recommend"), ("추천", 0.8, POSITIVE, "recommend"),
    ("만족", 1.0, POSITIVE, "satisfied"), ("대박", 1.0, POSITIVE, "amazing"),
    ("짱", 1.0, POSITIVE, "awesome"), ("인생템", 1.0, POSITIVE, "holy grail"),
    ("재구매", 1.0, POSITIVE, "repurchase"),
    ("갓성비", 1.2, POSITIVE, "best value"), ("가성비", 1.1, POSITIVE, "good value"),
    ("듀프", 1.1, POSITIVE, "dupe"), ("바이럴", 1.1, POSITIVE, "viral"),
    ("핫템", 1.1, POSITIVE, "trending"),
    ("amazing", 1.0, POSITIVE, None), ("love", 1.0, POSITIVE, None),
    ("best", 1.0, POSITIVE, None), ("recommend", 0.8, POSITIVE, None),
    ("great", 0.8, POSITIVE, None), ("holy grail", 1.2, POSITIVE, None),
    ("dupe", 1.2, POSITIVE, None), ("worth the hype", 1.2, POSITIVE, None),
    ("game-changer", 1.2, POSITIVE, None), ("game changer", 1.2, POSITIVE, None),
    ("must-have", 1.1, POSITIVE, None), ("must have", 1.1, POSITIVE, None),
    ("staple", 1.0, POSITIVE, None), ("cult favorite", 1.2, POSITIVE, None),
    ("cult-favorite", 1.2, POSITIVE, None), ("viral", 1.1, POSITIVE, None),
    ("trending", 1.0, POSITIVE, None), ("hype", 1.0, POSITIVE, None),
    ("hyped", 1.0, POSITIVE, None), ("obsessed", 1.1, POSITIVE, None),
    ("in love", 1.0, POSITIVE, None), ("favorite", 1.0, POSITIVE, None),
    ("fave", 1.0, POSITIVE, None), ("repurchase", 1.1, POSITIVE, None),
    ("will repurchase", 1.2, POSITIVE, None), ("worth it", 1.1, POSITIVE, None),
    ("chef kiss", 1.0, POSITIVE, None), ("no skip", 1.0, POSITIVE, None),
    ("slaps", 1.0, POSITIVE, None), ("slay", 0.9, POSITIVE, None),
    ("favorites", 1.0, POSITIVE, None), ("top picks", 1.0, POSITIVE, None),
    ("grwm", 1.0, NEUTRAL, None), ("get ready with me", 1.0, NEUTRAL, None),
    ("ugc", 1.0, NEUTRAL, None), ("haul", 1.0, NEUTRAL, None),
    ("unboxing", 1.0, NEUTRAL, None), ("first impressions", 1.0, NEUTRAL, None),
    ("empties", 1.0, NEUTRAL, None), ("honest review", 1.0, NEUTRAL, None),
    ("별로", 0.8, NEGATIVE, "not great"), ("실망", 1.0, NEGATIVE, "disappointed"),
    ("효과없음", 1.0, NEGATIVE, "no effect"),
    ("disappointed", 1.0, NEGATIVE, None), ("not worth", 1.0, NEGATIVE, None),
    ("not worth it", 1.1, NEGATIVE, None), ("overhyped", 1.1, NEGATIVE, None),
    ("overrated", 1.0, NEGATIVE, None), ("meh", 0.8, NEGATIVE, None),
    ("waste", 1.0, NEGATIVE, None), ("broke me out", 1.2, NEGATIVE, None),
    ("breakout", 1.0, NEGATIVE, None), ("irritation", 1.0, NEGATIVE, None),
    ("allergic", 1.1, NEGATIVE, None),
]


# =============================================================================
# DYNAMIC KEYWORD MINING
# =============================================================================

STOP_WORDS = frozenset([
    # English function words
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could", "should",
    "may", "might", "must", "shall", "can", "need", "dare", "ought", "used",
    "to", "of", "in", "for", "on", "with", "at", "by", "from", "as", "into",
    "about", "like", "through", "after", "over", "between", "out", "against",
    "and", "but", "or", "nor", "so", "yet", "both", "either", "neither",
    "not", "only", "own", "same", "than", "too", "very", "just", "also",
    "this", "that", "these", "those", "it", "its", "my", "your", "his", "her",
    "i", "you", "he", "she", "we", "they", "me", "him", "us", "them",
    "what", "which", "who", "whom", "whose", "where", "when", "why", "how",
    "all", "each", "every", "any", "some", "no", "none", "more", "most", "other",
    "up", "down", "here", "there", "now", "then", "if", "because", "while",
    # video / social meta
    "video", "videos", "subscribe", "channel", "watch", "review", "reviews", "tutorial",
    "routine", "routines", "using", "trying", "tried", "try", "test", "testing", "tested",
    "get", "got", "getting", "use", "make", "made", "making", "see", "look",
    "looking", "looks", "new", "one", "first", "day", "days", "time", "way", "back",
    "really", "actually", "literally", "honestly", "think", "know", "want",
    "going", "come", "coming", "take", "taking", "put", "give", "work", "works",
    "link", "below", "check", "comment", "comments", "share", "follow", "likes",
    # Korean function words
    "이", "그", "저", "것", "수", "등", "및", "더", "또", "안", "좀", "잘", "못",
    "너무", "많이", "정말", "진짜", "완전", "되게", "엄청", "리뷰", "후기", "영상",
    # URLs
    "https", "http", "www", "com", "org", "net", "youtube", "youtu",
    "bit", "linktr", "instagram", "tiktok", "facebook", "twitter",
    # generic commerce words
    "products", "product", "skin", "face", "best", "good", "bad",
    "right", "wrong", "full", "free", "shop", "buy", "sale", "off", "code",
    "affiliate", "sponsored", "gifted", "discount", "coupon",
])

BOOST_WORDS = frozenset([
    # next-generation ingredients
    "pdrn", "exosomes", "exosome", "polynucleotides", "polynucleotide",
    "nmn", "nhn", "ectoin", "bakuchiol", "egf", "fgf",
    "postbiotics", "postbiotic", "probiotics", "prebiotics",
    "glutathione", "copper", "tranexamic", "azelaic", "pha", "lha", "resveratrol",
    "astaxanthin", "fullerene", "salmon",
    # established ingredients
    "collagen", "peptide", "niacinamide", "retinol", "hyaluronic",
    "vitamin", "ceramide", "cica", "centella", "snail", "propolis", "aha", "bha",
    "adenosine", "bifida", "galactomyces", "saccharomyces", "ferment", "fermented",
    "mugwort", "artemisia", "madecassoside", "allantoin", "panthenol",
    "arbutin", "kojic", "licorice", "glucan",
    # skincare concepts
    "skinimalism", "glass", "glassy", "cloud", "barrier", "microbiome", "slugging",
    "clean", "waterless", "dewy", "plump", "plumping", "bouncy", "translucent",
    "poreless", "luminous", "radiant", "radiance", "glow", "glowy",
    "regenerating", "rejuvenating", "revitalizing",
    # makeup
    "blurring", "blur", "hybrid", "cushion", "tinted", "matte", "satin", "velvet",
    "glossy", "sheer", "buildable", "coverage", "waterproof",
    # social
    "dupe", "viral", "hype", "hyped", "trending", "staple", "obsessed", "favorite",
    "fave", "repurchase", "worth", "slaps", "slay", "grwm", "ugc", "haul",
    "unboxing", "empties",
    # textures
    "serum", "cream", "gel", "lotion", "essence", "toner", "ampoule", "mask",
    "moisturizer", "cleanser", "sunscreen", "spf", "oil", "balm",
    # effects
    "hydrating", "brightening", "moisturizing", "soothing", "firming",
    "acne", "pore", "pores", "wrinkle", "lifting", "exfoliating", "nourishing",
    # usage feel
    "lightweight", "smooth", "absorbs", "sticky", "refreshing", "silky",
    # K-beauty brands
    "medicube", "anua", "cosrx", "beauty", "korean", "kbeauty", "skincare",
    "innisfree", "laneige", "sulwhasoo", "amorepacific", "missha", "etude",
    "klairs", "isntree", "goodal", "torriden",
    # Korean
    "보습", "수분", "진정", "미백", "탄력", "세럼", "크림", "앰플", "토너", "선크림",
])


@dataclass(frozen=True)
class KeywordEntry:
    """One dictionary keyword."""
    term: str
    category: str
    weight: float
    sentiment: Optional[str] = None
    canonical: Optional[str] = None

    @property
    def match_key(self) -> str:
        return self.term.lower()

    @property
    def display(self) -> str:
        """English form for hashtags (canonical if the term is localized)."""
        return self.canonical or self.term


class KeywordLexicon:
    """Category-indexed keyword table, built once and shared read-only."""

    def __init__(self, entries: List[KeywordEntry]):
        self.entries = list(entries)
        self.by_category: Dict[str, List[KeywordEntry]] = {}
        for entry in self.entries:
            self.by_category.setdefault(entry.category, []).append(entry)

    @property
    def categories(self) -> List[str]:
        return list(self.by_category)

    def label(self, category: str) -> Dict[str, str]:
        return CATEGORY_LABELS.get(category, {"ko": category, "en": category})

    def __len__(self) -> int:
        return len(self.entries)


def build_default_lexicon() -> KeywordLexicon:
    entries: List[KeywordEntry] = []
    tables = [
        ("texture", _TEXTURE),
        ("ingredients", _INGREDIENTS),
        ("effects", _EFFECTS),
        ("scent", _SCENT),
        ("usage_feel", _USAGE_FEEL),
        ("target", _TARGET),
    ]
    for category, rows in tables:
        for term, weight, canonical in rows:
            entries.append(KeywordEntry(term, category, weight, canonical=canonical))
    for term, weight, polarity, canonical in _SENTIMENT:
        entries.append(KeywordEntry(term, "sentiment", weight, sentiment=polarity, canonical=canonical))
    return KeywordLexicon(entries)


DEFAULT_LEXICON = build_default_lexicon()
