# backend/services/locations.py
# נתוני מיקום סטטיים: אזורים ויישובים לכל אזור
from typing import Dict, List

AREAS: List[str] = [
    "ערבה",
    "נגב",
    "ים המלח",
    "מרכז",
    "עמקים",
    "חיפה",
    "גליל וגולן",
    "אחר",
]

SETTLEMENT_MAP: Dict[str, List[str]] = {
    "ערבה": ["אילת", "יטבתה", "פארן", "קטורה", "אליפז", "אחר"],
    "נגב": ["באר שבע", "דימונה", "ערד", "מצפה רמון", "ירוחם", "נתיבות", "אופקים", "שדרות", "אחר"],
    "ים המלח": ["עין גדי", "נווה זוהר", "ורד יריחו", "מצפה שלם", "אחר"],
    "מרכז": [
        "תל אביב-יפו", "ירושלים", "ראשון לציון", "פתח תקווה", "חולון", "רמת גן", "גבעתיים",
        "בת ים", "בני ברק", "רחובות", "נס ציונה", "לוד", "רמלה", "מודיעין-מכבים-רעות", "אחר",
    ],
    "עמקים": ["עפולה", "בית שאן", "טבריה", "מגדל העמק", "יקנעם עילית", "נצרת", "נצרת עילית (נוף הגליל)", "אחר"],
    "חיפה": [
        "חיפה", "חדרה", "קרית אתא", "נשר", "טירת כרמל", "קרית ים", "קרית ביאליק",
        "קרית מוצקין", "זכרון יעקב", "אור עקיבא", "אחר",
    ],
    "גליל וגולן": ["צפת", "קצרין", "קרית שמונה", "כרמיאל", "נהריה", "עכו", "מעלות-תרשיחא", "שלומי", "אחר"],
    "אחר": ["בבקשה צרף כתובת מלאה בשורת הכתיבה"],
}


def is_valid_area(area: str) -> bool:
    return area in AREAS
