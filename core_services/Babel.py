from typing import Optional


class Babel:
    """Keeps track of the language in which the response is rendered."""

    def __init__(self, default_lan_id: int = 1, languages: dict[int, str] = None):
        self.default_lan_id = default_lan_id
        self.languages = languages or {default_lan_id: "en"}
        self.lan_id = default_lan_id

    def set_language(self, lan_id: Optional[int]) -> int:
        # Unknown languages fall back on the default language.
        self.lan_id = lan_id if lan_id in self.languages else self.default_lan_id
        return self.lan_id
