"""
Prompt enrichment.

Expands short natural-language app descriptions with a baseline feature set
and domain-specific features detected from keywords, and names the screens a
prompt explicitly asks for.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ...models.screens import ScreenSection

DETAILED_PROMPT_CHARS = 100

BASE_FEATURES = """
BASELINE FEATURES (every modern mobile app):
- Authentication flow (login, registration, logout, password recovery)
- Home/dashboard with clear navigation (drawer or bottom navigation)
- Editable user profile with personal settings
- Notifications and alerts
- Loading, error and success states for every operation
- Form validation with clear messages
- Responsive layout for different screen sizes
- App settings (theme, language)

TECHNICAL REQUIREMENTS:
- At least 5 functional main screens
- Reactive forms with live validation
- Smooth navigation between all screens
- Reusable widgets and organized code"""

DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "finance": ("accounting", "financ", "bank", "money", "transaction", "payment", "invoice", "budget",
                "contable", "banco", "dinero", "pago", "factura", "presupuesto"),
    "education": ("school", "student", "teacher", "course", "learning", "lesson",
                  "escolar", "estudiante", "profesor", "curso", "educativ", "aprendizaje"),
    "health": ("medical", "hospital", "patient", "appointment", "health", "clinic", "doctor",
               "medico", "paciente", "cita", "salud", "clinica"),
    "commerce": ("shop", "store", "sale", "product", "cart", "purchase", "ecommerce", "catalog",
                 "tienda", "venta", "producto", "carrito", "compra", "catalogo"),
    "delivery": ("delivery", "order", "restaurant", "food", "entrega", "pedido", "restaurante",
                 "comida", "domicilio"),
    "social": ("chat", "message", "friend", "social", "post", "comment", "mensaje", "amigo", "comentario"),
    "productivity": ("task", "project", "calendar", "schedule", "todo", "agenda", "tarea", "proyecto",
                     "organizacion"),
    "entertainment": ("game", "music", "video", "streaming", "movie", "juego", "musica", "entretenimiento"),
}

DOMAIN_FEATURES: dict[str, tuple[str, ...]] = {
    "finance": ("Account overview with balances", "Transaction history with filters",
                "Payments and transfers", "Budgets and spending charts", "Invoice management"),
    "education": ("Course catalog", "Lesson viewer with progress tracking", "Assignments and grades",
                  "Class schedule", "Teacher and student messaging"),
    "health": ("Appointment booking", "Doctor directory", "Patient records", "Medication reminders",
               "Visit history"),
    "commerce": ("Product catalog with search and filters", "Product detail pages", "Shopping cart",
                 "Checkout flow", "Order history"),
    "delivery": ("Restaurant and menu browsing", "Cart and checkout", "Live order tracking",
                 "Delivery addresses", "Order history and ratings"),
    "social": ("Feed of posts", "Post creation with media", "Comments and reactions", "Direct messages",
               "Friend lists and profiles"),
    "productivity": ("Task lists with priorities", "Projects and boards", "Calendar view",
                     "Reminders and due dates", "Progress summaries"),
    "entertainment": ("Content catalog", "Player screen", "Favorites and playlists",
                      "Recommendations", "Watch or play history"),
    "generic": ("Item list with search", "Item detail screen", "Create and edit forms",
                "Favorites", "Activity history"),
}


def detect_domain(prompt: str) -> str:
    """Detect the app domain from keywords; 'generic' when nothing matches."""
    lowered = (prompt or "").lower()
    for domain, keywords in DOMAIN_KEYWORDS.items():
        if any(re.search(rf"\b{re.escape(keyword)}", lowered) for keyword in keywords):
            return domain
    return "generic"


def enrich_prompt(prompt: str) -> str:
    """Expand a natural-language app description.

    Detailed prompts (over 100 characters) only get the baseline features
    appended; shorter ones also get the features of their detected domain.

    Args:
        prompt: The user's description.

    Returns:
        The enriched description.
    """
    prompt = (prompt or "").strip()
    if len(prompt) > DETAILED_PROMPT_CHARS:
        return prompt + "\n" + BASE_FEATURES

    domain = detect_domain(prompt)
    features = "\n".join(f"- {feature}" for feature in DOMAIN_FEATURES[domain])
    return f"{prompt}\n\nDOMAIN FEATURES ({domain}):\n{features}\n{BASE_FEATURES}"


@dataclass(frozen=True)
class PromptScreen:
    """A screen that prompts commonly ask for by name."""

    title: str
    keywords: tuple[str, ...]
    description: str
    fields: tuple[str, ...] = ()
    buttons: tuple[str, ...] = ()


PROMPT_SCREENS: tuple[PromptScreen, ...] = (
    PromptScreen("LoginScreen", ("login", "log in", "sign in", "iniciar sesion"), "Sign in form",
                 ("Email", "Password"), ("Sign in",)),
    PromptScreen("RegisterScreen", ("register", "sign up", "signup", "registro"), "Account registration form",
                 ("Your name", "Email", "Password"), ("Create account",)),
    PromptScreen("HomeScreen", ("home", "dashboard", "inicio"), "Main overview"),
    PromptScreen("ProfileScreen", ("profile", "perfil", "account"), "User profile",
                 ("Name", "Email"), ("Save",)),
    PromptScreen("SettingsScreen", ("settings", "preferences", "configuracion"), "App settings"),
    PromptScreen("ProductsScreen", ("product", "catalog", "producto"), "Product catalog"),
    PromptScreen("CartScreen", ("cart", "carrito", "checkout"), "Shopping cart", (), ("Checkout",)),
    PromptScreen("OrdersScreen", ("order", "pedido"), "Order history"),
    PromptScreen("TasksScreen", ("task", "todo", "tarea"), "Task list", ("New task",), ("Add",)),
    PromptScreen("CalendarScreen", ("calendar", "schedule", "agenda"), "Calendar view"),
    PromptScreen("ChatScreen", ("chat", "message", "mensaje"), "Conversations", ("Message",), ("Send",)),
    PromptScreen("NotificationsScreen", ("notification", "notificacion"), "Notifications"),
)

_STRUCTURED_SCREEN_RE = re.compile(r"^\s*\d+\.\s*(?P<title>\w+Screen)\s*:\s*(?P<description>.+?)\s*$", re.MULTILINE)


def screens_from_prompt(prompt: str) -> list[ScreenSection]:
    """Screens a prompt explicitly asks for.

    Numbered `N. NameScreen: description` lines win when present; otherwise
    screens are recognized from keywords.

    Args:
        prompt: The user's description.

    Returns:
        Screen sections in table order; empty if nothing was recognized.
    """
    prompt = prompt or ""
    structured = [
        ScreenSection(title=m.group("title"), description=m.group("description"), texts=(m.group("description"),))
        for m in _STRUCTURED_SCREEN_RE.finditer(prompt)
    ]
    if structured:
        return list({s.title: s for s in structured}.values())

    lowered = prompt.lower()
    sections = []
    for screen in PROMPT_SCREENS:
        if any(re.search(rf"\b{re.escape(keyword)}", lowered) for keyword in screen.keywords):
            sections.append(ScreenSection(
                title=screen.title,
                description=screen.description,
                texts=(screen.description,),
                fields=screen.fields,
                buttons=screen.buttons,
            ))
    return sections
