"""
Per-language keyword and response tables.

One table drives both intent detection (keyword triggers) and the canned
replies the parser hands back. Each language keeps its own synonyms; they are
not translations of the English list, so edit them independently.

Supported display languages: en, hi, es, fr.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Literal

KeywordIntent = Literal["greeting", "buy", "balance", "help", "thanks"]

DEFAULT_LANGUAGE = "en"

KEYWORDS: dict[str, dict[KeywordIntent, tuple[str, ...]]] = {
    "en": {
        "greeting": ("hi", "hello", "hey", "gm", "good morning", "good evening", "yo"),
        "buy": ("buy", "purchase", "get some"),
        "balance": ("balance", "how much", "what do i have", "my funds", "my wallet"),
        "help": ("help", "what can you do", "commands", "how does this work"),
        "thanks": ("thanks", "thank you", "thx", "who are you", "about you"),
    },
    "hi": {
        "greeting": ("namaste", "नमस्ते", "namaskar", "नमस्कार", "राम राम"),
        "buy": ("खरीदें", "खरीदना", "kharidna", "kharido"),
        "balance": ("बैलेंस", "शेष राशि", "कितना है", "kitna hai", "mera balance"),
        "help": ("मदद", "सहायता", "madad", "kya kar sakte ho"),
        "thanks": ("धन्यवाद", "शुक्रिया", "dhanyavad", "shukriya", "तुम कौन हो"),
    },
    "es": {
        "greeting": ("hola", "buenos días", "buenos dias", "buenas tardes", "buenas"),
        "buy": ("comprar", "compra", "quiero comprar"),
        "balance": ("saldo", "cuánto tengo", "cuanto tengo", "mi billetera"),
        "help": ("ayuda", "qué puedes hacer", "que puedes hacer", "comandos"),
        "thanks": ("gracias", "muchas gracias", "quién eres", "quien eres"),
    },
    "fr": {
        "greeting": ("bonjour", "salut", "coucou", "bonsoir"),
        "buy": ("acheter", "achat", "je veux acheter"),
        "balance": ("solde", "combien j'ai", "mon portefeuille"),
        "help": ("aide", "que peux-tu faire", "commandes"),
        "thanks": ("merci", "merci beaucoup", "qui es-tu"),
    },
}

ResponseKey = Literal["greeting", "help", "balance", "buy", "thanks", "fallback"]

RESPONSES: dict[str, dict[ResponseKey, str]] = {
    "en": {
        "greeting": (
            "Hey there! 👋 I'm Lingo, your crypto assistant.\n\n"
            'Try:\n• "Swap 0.01 ETH to USDC"\n• "Send 10 USDC to +1234567890"\n• "What\'s my balance?"'
        ),
        "help": (
            "🤖 I'm Lingo! Here's what I can do:\n\n"
            '📤 Send crypto:\n"Send 10 USDC to +1234567890"\n"Send 0.01 ETH to 0x..."\n\n'
            '🔄 Swap tokens:\n"Swap 0.1 ETH to USDC"\n"Exchange 50 USDC for ETH"\n\n'
            '🌉 Bridge:\n"Bridge 10 USDC to arbitrum"\n\n'
            '💰 Check balance:\n"What\'s my balance?"\n\n'
            "Supported tokens: {tokens}"
        ),
        "balance": "💰 Your balance is shown above! I display your ETH and USDC balances on Base.",
        "buy": '💡 To buy {token}, use the swap feature!\n\nTry: "Swap USDC to {token}"',
        "thanks": "You're welcome! I'm Lingo, a wallet you can talk to in your own language. 🌍",
        "fallback": (
            "I'm not sure what you mean. Try:\n\n"
            '🔄 "Swap 0.1 ETH to USDC"\n📤 "Send 10 USDC to +1234567890"\n💰 "What\'s my balance?"\n\n'
            'Or type "help" for more options!'
        ),
    },
    "hi": {
        "greeting": (
            "नमस्ते! 👋 मैं Lingo हूँ, आपका क्रिप्टो सहायक।\n\n"
            'आज़माएँ:\n• "Swap 0.01 ETH to USDC"\n• "Send 10 USDC to +1234567890"'
        ),
        "help": (
            "🤖 मैं Lingo हूँ! मैं यह कर सकता हूँ:\n\n"
            '📤 भेजें: "Send 10 USDC to +1234567890"\n'
            '🔄 स्वैप: "Swap 0.1 ETH to USDC"\n'
            '🌉 ब्रिज: "Bridge 10 USDC to arbitrum"\n\n'
            "समर्थित टोकन: {tokens}"
        ),
        "balance": "💰 आपका बैलेंस ऊपर दिखाया गया है! मैं Base पर आपका ETH और USDC बैलेंस दिखाता हूँ।",
        "buy": '💡 {token} खरीदने के लिए स्वैप का उपयोग करें!\n\nआज़माएँ: "Swap USDC to {token}"',
        "thanks": "आपका स्वागत है! मैं Lingo हूँ, एक वॉलेट जिससे आप अपनी भाषा में बात कर सकते हैं। 🌍",
        "fallback": 'मुझे समझ नहीं आया। "help" लिखकर देखें कि मैं क्या कर सकता हूँ!',
    },
    "es": {
        "greeting": (
            "¡Hola! 👋 Soy Lingo, tu asistente cripto.\n\n"
            'Prueba:\n• "Swap 0.01 ETH to USDC"\n• "Send 10 USDC to +1234567890"'
        ),
        "help": (
            "🤖 ¡Soy Lingo! Esto es lo que puedo hacer:\n\n"
            '📤 Enviar: "Send 10 USDC to +1234567890"\n'
            '🔄 Intercambiar: "Swap 0.1 ETH to USDC"\n'
            '🌉 Puente: "Bridge 10 USDC to arbitrum"\n\n'
            "Tokens soportados: {tokens}"
        ),
        "balance": "💰 ¡Tu saldo aparece arriba! Muestro tus saldos de ETH y USDC en Base.",
        "buy": '💡 Para comprar {token}, ¡usa el intercambio!\n\nPrueba: "Swap USDC to {token}"',
        "thanks": "¡De nada! Soy Lingo, una billetera con la que puedes hablar en tu idioma. 🌍",
        "fallback": 'No estoy seguro de lo que quieres decir. ¡Escribe "ayuda" para ver las opciones!',
    },
    "fr": {
        "greeting": (
            "Bonjour ! 👋 Je suis Lingo, votre assistant crypto.\n\n"
            'Essayez :\n• "Swap 0.01 ETH to USDC"\n• "Send 10 USDC to +1234567890"'
        ),
        "help": (
            "🤖 Je suis Lingo ! Voici ce que je sais faire :\n\n"
            '📤 Envoyer : "Send 10 USDC to +1234567890"\n'
            '🔄 Échanger : "Swap 0.1 ETH to USDC"\n'
            '🌉 Bridge : "Bridge 10 USDC to arbitrum"\n\n'
            "Tokens pris en charge : {tokens}"
        ),
        "balance": "💰 Votre solde est affiché ci-dessus ! J'affiche vos soldes ETH et USDC sur Base.",
        "buy": '💡 Pour acheter du {token}, utilisez l\'échange !\n\nEssayez : "Swap USDC to {token}"',
        "thanks": "Avec plaisir ! Je suis Lingo, un portefeuille qui parle votre langue. 🌍",
        "fallback": 'Je ne suis pas sûr de comprendre. Tapez "aide" pour voir les options !',
    },
}

SUPPORTED_LANGUAGES: frozenset[str] = frozenset(KEYWORDS)


def normalize_language(language: str | None) -> str:
    """Reduce a hint like 'es-MX' to a table key, falling back to English."""
    if not language:
        return DEFAULT_LANGUAGE
    code = language.strip().lower().replace("_", "-").split("-")[0]
    return code if code in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def languages_to_consult(language: str | None) -> tuple[str, ...]:
    """English is always consulted; the hint language is added when different."""
    lang = normalize_language(language)
    if lang == DEFAULT_LANGUAGE:
        return (DEFAULT_LANGUAGE,)
    return (DEFAULT_LANGUAGE, lang)


@lru_cache(maxsize=None)
def _phrase_pattern(phrase: str) -> re.Pattern[str]:
    # Whole-word match; works for scripts without spaces-inside-words too
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)", re.IGNORECASE)


def contains_phrase(text: str, phrase: str) -> bool:
    return _phrase_pattern(phrase).search(text) is not None


def starts_with_phrase(text: str, phrase: str) -> bool:
    return _phrase_pattern(phrase).match(text.lstrip()) is not None


def keywords_for(intent: KeywordIntent, languages: tuple[str, ...]) -> list[str]:
    out: list[str] = []
    for lang in languages:
        out.extend(KEYWORDS.get(lang, {}).get(intent, ()))
    return out


def all_greetings() -> list[str]:
    """Greeting tokens from every language; a greeting is recognized regardless of hint."""
    return keywords_for("greeting", tuple(KEYWORDS))


def response(key: ResponseKey, language: str | None = None, **fields: str) -> tuple[str, str]:
    """
    Localized canned reply.

    Returns:
        (text, language) where language is the table actually used
    """
    lang = normalize_language(language)
    template = RESPONSES.get(lang, {}).get(key)
    if template is None:
        lang = DEFAULT_LANGUAGE
        template = RESPONSES[DEFAULT_LANGUAGE][key]
    return template.format(**fields) if fields else template, lang
