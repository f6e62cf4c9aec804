from typing import Optional


def extract_json_block(text: str) -> Optional[str]:
    """
    Return the substring from the first '{' to the last '}'.

    Generation output often wraps the JSON in prose or ``` fences; the
    outermost braces span the whole object. Returns None when there is
    no such region.
    """
    if not text or not isinstance(text, str):
        return None

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start:end + 1]
