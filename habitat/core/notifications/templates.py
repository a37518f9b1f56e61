"""French message catalogue for push notifications.

Strings are part of the wire contract with the deployed mobile client; change
them only together with the client.
"""

from __future__ import annotations

from typing import Dict, NamedTuple


class Template(NamedTuple):
    title: str
    body: str

    def render(self, **values) -> tuple[str, str]:
        return self.title.format(**values), self.body.format(**values)


MESSAGES: Dict[str, Template] = {
    "reservation_created": Template(
        "🏠 Nouvelle Réservation!",
        "{guest} a fait une réservation pour {property}",
    ),
    "reservation_accepted": Template(
        "🎉 Réservation Acceptée!",
        "{host} a accepté votre réservation pour {property}",
    ),
    "reservation_rejected": Template(
        "😔 Réservation Refusée",
        "{host} a refusé votre réservation pour {property}",
    ),
    "message_received": Template(
        "💬 Nouveau Message",
        "{sender} vous a envoyé un message concernant {property}",
    ),
    "video_like": Template(
        "❤️ Votre Vidéo a été Aimée!",
        "{user} a aimé votre vidéo: {videoTitle}",
    ),
    "video_comment": Template(
        "💬 Nouveau Commentaire!",
        "{user} a commenté votre vidéo: {videoTitle}",
    ),
    "video_other": Template(
        "📹 Interaction Vidéo",
        "{user} a interagi avec votre vidéo: {videoTitle}",
    ),
    "experience_booked": Template(
        "🎯 Nouvelle Réservation d'Expérience!",
        "{guest} a réservé votre expérience: {title}",
    ),
    "property_approved": Template(
        "✅ Propriété Approuvée!",
        "Félicitations! Votre propriété '{title}' a été approuvée et est maintenant visible.",
    ),
    "property_rejected": Template(
        "❌ Propriété Rejetée",
        "Votre propriété '{title}' a été rejetée. Veuillez vérifier les détails et soumettre à nouveau.",
    ),
    "property_under_review": Template(
        "🔍 Propriété en Révision",
        "Votre propriété '{title}' est en cours de révision par nos équipes.",
    ),
    "property_other": Template(
        "🏠 Mise à Jour de Propriété",
        "Le statut de votre propriété '{title}' a été mis à jour: {status}",
    ),
    "reservation_reminder_tomorrow": Template(
        "⏰ Rappel: Réservation Demain!",
        "N'oubliez pas votre séjour à {title} demain!",
    ),
    "reservation_reminder": Template(
        "📅 Rappel de Réservation",
        "Votre séjour à {title} commence dans {days} jours!",
    ),
    "welcome": Template(
        "🎉 Bienvenue sur habitat!",
        "Bonjour {firstName}! Découvrez des logements incroyables en Mauritanie.",
    ),
}


def render(key: str, **values) -> tuple[str, str]:
    """Title and body for ``key``; raises ``KeyError`` for unknown keys."""
    return MESSAGES[key].render(**values)
