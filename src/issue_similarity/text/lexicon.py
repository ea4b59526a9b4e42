"""Default dictionaries used by the text normalizer.

Phrase order is significant: when two phrases could match at the same
position, the one listed first wins.
"""

from __future__ import annotations

PHRASE_MAP: dict[str, str] = {
    "does not work": "broken",
    "doesn't work": "broken",
    "not working": "broken",
    "no longer works": "broken",
    "log in": "login",
    "log on": "login",
    "sign in": "login",
    "sign-in": "login",
    "log out": "logout",
    "sign out": "logout",
    "sign-out": "logout",
    "sign up": "signup",
    "mobile application": "mobile",
    "mobile app": "mobile",
    "web application": "web",
    "web app": "web",
    "user interface": "ui",
    "null pointer exception": "npe",
    "nullpointerexception": "npe",
    "out of memory": "oom",
    "time out": "timeout",
    "timed out": "timeout",
    "error message": "error",
    "stack trace": "stacktrace",
    "drop down": "dropdown",
    "drop-down": "dropdown",
    "pop up": "popup",
    "pop-up": "popup",
    "e-mail": "email",
}

SYNONYMS: dict[str, str] = {
    "fail": "fail",
    "fails": "fail",
    "failed": "fail",
    "failing": "fail",
    "failure": "fail",
    "failures": "fail",
    "crash": "crash",
    "crashes": "crash",
    "crashed": "crash",
    "crashing": "crash",
    "error": "error",
    "errors": "error",
    "exception": "error",
    "exceptions": "error",
    "bug": "defect",
    "bugs": "defect",
    "defects": "defect",
    "issue": "defect",
    "issues": "defect",
    "signin": "login",
    "logon": "login",
    "logins": "login",
    "signout": "logout",
    "logoff": "logout",
    "password": "password",
    "passwords": "password",
    "pwd": "password",
    "app": "app",
    "apps": "app",
    "application": "app",
    "applications": "app",
    "android": "mobile",
    "ios": "mobile",
    "iphone": "mobile",
    "phone": "mobile",
    "slow": "slow",
    "slowness": "slow",
    "sluggish": "slow",
    "lag": "slow",
    "laggy": "slow",
    "hang": "freeze",
    "hangs": "freeze",
    "freezes": "freeze",
    "frozen": "freeze",
    "stuck": "freeze",
    "button": "button",
    "buttons": "button",
    "btn": "button",
    "page": "page",
    "pages": "page",
    "screen": "page",
    "screens": "page",
    "users": "user",
    "customer": "user",
    "customers": "user",
    "timeouts": "timeout",
    "emails": "email",
    "mail": "email",
    "broke": "broken",
    "breaks": "broken",
    "wrong": "incorrect",
    "invalid": "incorrect",
    "missing": "absent",
    "disappears": "absent",
    "disappeared": "absent",
}

STOPWORDS: frozenset[str] = frozenset(
    {
        "a", "about", "after", "again", "all", "also", "am", "an", "and", "any",
        "are", "as", "at", "be", "because", "been", "before", "being", "but",
        "by", "can", "could", "did", "do", "does", "doing", "during", "each",
        "for", "from", "had", "has", "have", "having", "he", "her", "here",
        "him", "his", "how", "i", "if", "in", "into", "is", "it", "its",
        "itself", "just", "me", "more", "most", "my", "no", "nor", "not",
        "now", "of", "on", "once", "only", "or", "other", "our", "out", "over",
        "own", "same", "she", "should", "so", "some", "such", "than", "that",
        "the", "their", "them", "then", "there", "these", "they", "this",
        "those", "through", "to", "too", "under", "until", "up", "very", "was",
        "we", "were", "what", "when", "where", "which", "while", "who", "whom",
        "why", "will", "with", "would", "you", "your",
    }
)
