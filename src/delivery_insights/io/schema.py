# src/delivery_insights/io/schema.py
from __future__ import annotations

from typing import Mapping

from delivery_insights.models import DeliveryStatus

# Source export column -> Delivery field. Anything else in a row is ignored.
HEADER_MAPPING: Mapping[str, str] = {
    "Date": "date",
    "Statut": "status",
    "Raison d’échec de livraison": "failure_reason",
    "Raison d'échec de livraison": "failure_reason",
    "ID de la tâche": "task_id",
    "Entrepôt": "warehouse",
    "Livreur": "driver",
    "Tournée": "tour_id",
    "Séquence": "sequence",
    "Retard (s)": "delay_seconds",
    "Qu'avez vous pensé de la livraison de votre commande?": "comment",
    "Notez votre livraison": "rating",
    "Sans contact forcé": "forced_no_contact",
    "Raison de confirmation sans contact": "no_contact_reason",
    "Sur place forcé": "forced_on_site",
    "Complété par": "completed_by",
}

STATUS_LABELS: Mapping[str, DeliveryStatus] = {s.value: s for s in DeliveryStatus}

# Sentinels used wherever a grouping field cannot be resolved
UNKNOWN = "Inconnu"
UNKNOWN_DEPOT = "Dépôt Inconnu"
UNKNOWN_DRIVER = "Livreur Inconnu"
NOT_AVAILABLE = "N/A"

WAREHOUSE_DEPOT_MAP: Mapping[str, str] = {
    "Vitry": "Vitry",
    "Vitry SC": "Vitry",
    "Rungis": "Rungis",
    "Aix": "Aix",
    "Aix-en-Provence": "Aix",
    "Antibes": "Antibes",
    "Catries": "Catries",
    "VLG": "VLG",
    "CRF Rungis": "CRF",
    "Entrepôt Magasin": "Magasin",
}

# Checked in order after the ID LOG suffix / STT prefix rules; first suffix match wins.
CARRIERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("ID LOGISTICS", ("ID LOG", "IDL")),
    ("STEF", ("STEF",)),
    ("STAR SERVICE", ("STAR",)),
    ("GPL", ("GPL", "6", "7")),
    ("FRIGO", ("FRIGO",)),
    ("Sous traitants", ("STT",)),
    ("Autres", ()),
)

# Values accepted as "true" for the forced-completion flags (lower-cased)
TRUTHY_FLAGS: frozenset[str] = frozenset({"true", "oui", "yes", "1"})
