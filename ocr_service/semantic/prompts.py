from __future__ import annotations

from typing import Dict, Sequence

from .models import Category

SYSTEM_PROMPT = (
    "You are a precise OCR text analysis specialist with expertise in Korean text recognition errors. "
    "Follow instructions exactly. Return only the requested information without explanations, "
    "formatting, or additional text. Handle OCR recognition errors intelligently."
)


# -----------------
# Free-text extraction (stuttered speech transcripts)
# -----------------

EXTRACT_STORE = """TASK: Extract the exact store/restaurant name from stuttered speech.

CONTEXT: Users often stutter when saying store names. Your job is to identify the core business name, removing filler words and repetitions.

RULES:
1. Extract ONLY the main store/brand name
2. Remove stutters, filler words (어, 아, 그, 음, 잠깐만, 뭐지, 등)
3. If multiple versions of same name appear, choose the shortest complete form
4. Return Korean store names in Korean, English names in English
5. Do not add quotes, punctuation, or explanations
6. If no clear store name exists, return "NONE"

EXAMPLES:
Input: "아 그 교촌 어 교촌치킨"
Output: 교촌

Input: "어어 아 어 할머니보쌈"
Output: 할머니보쌈

Input: "맥도... 맥도날... 맥도날드"
Output: 맥도날드

Input: "버거킹 어 버거 버거킹 햄버거"
Output: 버거킹

Input: "스타 스타벅스 커피"
Output: 스타벅스

Input: "그냥 배고파"
Output: NONE

INPUT TEXT: "{text}"
OUTPUT:"""

EXTRACT_NUMBER = """TASK: Extract the specific number mentioned in stuttered speech.

CONTEXT: Users stutter when trying to say numbers. Extract the exact number they're attempting to communicate.

RULES:
1. Extract ONLY the number (digits)
2. Remove all filler words (아, 그, 어, 잠깐만, 번, 호, 등)
3. If same number repeated multiple times, return it once
4. Return only Arabic numerals (1, 2, 3, not 일, 이, 삼)
5. No decimal points unless clearly specified
6. If no number found, return "NONE"

EXAMPLES:
Input: "아 그 잠깐만 4번 어 4번"
Output: 4

Input: "5호 어 5 5호점"
Output: 5

Input: "이십 어 20 스무개"
Output: 20

Input: "한 하나 1개"
Output: 1

Input: "그냥 많이"
Output: NONE

INPUT TEXT: "{text}"
OUTPUT:"""

EXTRACT_FOOD = """TASK: Extract the exact food/menu item name from stuttered speech.

CONTEXT: Users stutter when ordering food. Extract the specific food/menu item they want to order.

RULES:
1. Extract ONLY the main food/menu item name
2. Remove stutters, filler words (어, 아, 그, 음, 잠깐만)
3. Keep food-specific terms (치킨, 피자, 버거, 라면, etc.)
4. If multiple versions of same food appear, choose the most complete form
5. Return Korean food names in Korean, English names in English
6. Do not include quantities, sizes, or modifiers unless part of the official name
7. If no clear food name exists, return "NONE"

EXAMPLES:
Input: "어 그 뿌링클 어 치킨"
Output: 뿌링클

Input: "불고기 어 불고기버거"
Output: 불고기버거

Input: "아 짜장 짜장면"
Output: 짜장면

Input: "핫윙 어 핫 핫윙스"
Output: 핫윙

Input: "그냥 배고파"
Output: NONE

INPUT TEXT: "{text}"
OUTPUT:"""


# -----------------
# OCR list filtering (with error correction)
# -----------------

FILTER_STORE = """TASK: Identify store/restaurant names from OCR text results with error correction.

CONTEXT: This is text extracted from images (signs, menus, etc.) using OCR technology. OCR often makes recognition errors, especially with Korean text.

TEXT LIST: [{items}]

RULES:
1. Identify text that represents store/restaurant/business names
2. Handle OCR recognition errors intelligently and provide corrected names
3. Exclude: prices, menu descriptions, addresses, phone numbers, hours, promotional text
4. Include: brand names, restaurant names, store names, franchise names
5. Return results as comma-separated values with corrected spelling
6. Keep original meaning but fix OCR errors
7. If no store names found, return "NONE"

OCR ERROR CORRECTION EXAMPLES:
- "맥도냘드" → "맥도날드"
- "스따벅스" → "스타벅스"
- "버거킹" → "버거킹"
- "교촌지킨" → "교촌치킨"
- "BBQ" → "BBQ"
- "롯떼리아" → "롯데리아"

ANALYSIS EXAMPLES:
Input: ["맥도날드", "빅맥세트", "5,500원", "영업시간", "02-123-4567"]
Output: 맥도날드

Input: ["스따벅스", "아메리카노", "4,500원", "카페라떼", "매장안내"]
Output: 스타벅스

Input: ["BBQ", "황금올리브치킨", "반반치킨", "17,000원", "배달가능"]
Output: BBQ

OUTPUT:"""

FILTER_FOOD = """TASK: Identify food/menu item names from OCR text results with error correction.

CONTEXT: This is text extracted from menu images using OCR technology. OCR often makes recognition errors, especially with Korean food names.

TEXT LIST: [{items}]

RULES:
1. Identify text that represents food items, dishes, beverages, menu items
2. Handle OCR recognition errors intelligently and provide corrected names
3. Exclude: store names, prices, promotional text, descriptions, categories
4. Include: specific food names, drink names, dish names, menu items
5. Return results as comma-separated values with corrected spelling
6. Keep original meaning but fix OCR errors
7. If no food names found, return "NONE"

OCR ERROR CORRECTION EXAMPLES:
- "비맥세트" → "빅맥세트"
- "지즈버거" → "치즈버거"
- "아메리가노" → "아메리카노"
- "불고기버거" → "불고기버거"
- "뿌링끌" → "뿌링클"
- "콜라" → "콜라"
- "화이트모까" → "화이트모카"

ANALYSIS EXAMPLES:
Input: ["맥도날드", "비맥세트", "5,500원", "지즈버거", "콜라"]
Output: 빅맥세트, 치즈버거, 콜라

Input: ["스타벅스", "아메리가노", "4,500원", "까페라떼", "매장안내"]
Output: 아메리카노, 카페라떼

Input: ["BBQ", "황금올리브치킨", "뿌링끌", "17,000원", "배달가능"]
Output: 황금올리브치킨, 뿌링클

OUTPUT:"""


EXTRACT_TEMPLATES: Dict[Category, str] = {
    Category.STORE: EXTRACT_STORE,
    Category.NUMBER: EXTRACT_NUMBER,
    Category.FOOD: EXTRACT_FOOD,
}

FILTER_TEMPLATES: Dict[Category, str] = {
    Category.STORE: FILTER_STORE,
    Category.FOOD: FILTER_FOOD,
}


def extract_prompt(category: Category, text: str) -> str:
    # str.replace rather than format: user text may contain braces
    return EXTRACT_TEMPLATES[category].replace("{text}", text)


def filter_prompt(category: Category, texts: Sequence[str]) -> str:
    items = ", ".join(f'"{t}"' for t in texts)
    return FILTER_TEMPLATES[category].replace("{items}", items)
