"""
Closed category taxonomy shared by item requests and seller specialties.

Every (category, sub_category) pair used anywhere in the system must appear
in CATEGORIES.
"""

from typing import Dict, List, Optional


CATEGORIES: Dict[str, Dict] = {
    "electronique": {
        "name": "Électronique",
        "icon": "phone-portrait-outline",
        "sub_categories": [
            ("smartphones", "Smartphones"),
            ("tablettes", "Tablettes"),
            ("ordinateurs", "Ordinateurs"),
            ("tv-audio", "TV & Audio"),
            ("appareils-photo", "Appareils photo"),
            ("gaming", "Gaming"),
            ("wearables", "Montres connectées"),
            ("accessoires", "Accessoires"),
        ],
    },
    "mobilier": {
        "name": "Mobilier",
        "icon": "bed-outline",
        "sub_categories": [
            ("salon", "Salon"),
            ("chambre", "Chambre"),
            ("cuisine", "Cuisine"),
            ("bureau", "Bureau"),
            ("salle-bain", "Salle de bain"),
            ("exterieur", "Extérieur"),
            ("rangement", "Rangement"),
            ("decoration", "Décoration"),
        ],
    },
    "vetements": {
        "name": "Vêtements",
        "icon": "shirt-outline",
        "sub_categories": [
            ("homme", "Homme"),
            ("femme", "Femme"),
            ("enfant", "Enfant"),
            ("bebe", "Bébé"),
            ("chaussures", "Chaussures"),
            ("accessoires", "Accessoires"),
            ("sport", "Sport"),
            ("mariage", "Mariage & Cérémonie"),
        ],
    },
    "livres": {
        "name": "Livres & Médias",
        "icon": "book-outline",
        "sub_categories": [
            ("romans", "Romans"),
            ("bd-mangas", "BD & Mangas"),
            ("enfants", "Enfants"),
            ("scolaires", "Scolaires"),
            ("cuisine", "Cuisine"),
            ("developpement", "Développement personnel"),
            ("musique", "Musique"),
            ("films", "Films & Séries"),
        ],
    },
    "sport": {
        "name": "Sport & Loisirs",
        "icon": "football-outline",
        "sub_categories": [
            ("fitness", "Fitness & Musculation"),
            ("velo", "Vélo"),
            ("sports-hiver", "Sports d'hiver"),
            ("sports-eau", "Sports nautiques"),
            ("football", "Football"),
            ("tennis", "Tennis"),
            ("camping", "Camping & Randonnée"),
            ("autres", "Autres sports"),
        ],
    },
    "jardinage": {
        "name": "Jardinage",
        "icon": "leaf-outline",
        "sub_categories": [
            ("outils", "Outils de jardinage"),
            ("plantes", "Plantes"),
            ("graines", "Graines & Bulbes"),
            ("pots", "Pots & Jardinières"),
            ("engrais", "Engrais & Terreau"),
            ("arrosage", "Arrosage"),
            ("mobilier-jardin", "Mobilier de jardin"),
            ("barbecue", "Barbecue & Plancha"),
        ],
    },
    "bricolage": {
        "name": "Bricolage",
        "icon": "hammer-outline",
        "sub_categories": [
            ("outils-main", "Outils à main"),
            ("outils-electriques", "Outils électriques"),
            ("peinture", "Peinture"),
            ("plomberie", "Plomberie"),
            ("electricite", "Électricité"),
            ("menuiserie", "Menuiserie"),
            ("carrelage", "Carrelage"),
            ("quincaillerie", "Quincaillerie"),
        ],
    },
    "cuisine": {
        "name": "Cuisine & Maison",
        "icon": "restaurant-outline",
        "sub_categories": [
            ("electromenager", "Électroménager"),
            ("ustensiles", "Ustensiles"),
            ("vaisselle", "Vaisselle"),
            ("petit-electro", "Petit électroménager"),
            ("robot-cuisine", "Robots de cuisine"),
            ("art-table", "Art de la table"),
            ("rangement-cuisine", "Rangement"),
            ("cave-vin", "Cave à vin"),
        ],
    },
    "decoration": {
        "name": "Décoration",
        "icon": "color-palette-outline",
        "sub_categories": [
            ("luminaires", "Luminaires"),
            ("textiles", "Textiles"),
            ("tableaux", "Tableaux & Posters"),
            ("miroirs", "Miroirs"),
            ("vases", "Vases & Objets déco"),
            ("bougies", "Bougies & Parfums"),
            ("horloges", "Horloges"),
            ("tapis", "Tapis"),
        ],
    },
    "jouets": {
        "name": "Jouets & Enfants",
        "icon": "game-controller-outline",
        "sub_categories": [
            ("premier-age", "Premier âge"),
            ("jeux-construction", "Jeux de construction"),
            ("poupees", "Poupées & Peluches"),
            ("jeux-societe", "Jeux de société"),
            ("puzzles", "Puzzles"),
            ("jeux-exterieur", "Jeux d'extérieur"),
            ("deguisements", "Déguisements"),
            ("educatifs", "Jeux éducatifs"),
        ],
    },
    "vehicules": {
        "name": "Véhicules",
        "icon": "car-outline",
        "sub_categories": [
            ("voitures", "Voitures"),
            ("motos", "Motos"),
            ("velos", "Vélos"),
            ("trottinettes", "Trottinettes"),
            ("pieces-auto", "Pièces auto"),
            ("accessoires-auto", "Accessoires auto"),
            ("caravaning", "Caravaning"),
            ("nautisme", "Nautisme"),
        ],
    },
    "autres": {
        "name": "Autres",
        "icon": "ellipsis-horizontal-outline",
        "sub_categories": [
            ("animaux", "Animaux"),
            ("services", "Services"),
            ("musique", "Instruments de musique"),
            ("collection", "Collection"),
            ("antiquites", "Antiquités"),
            ("artisanat", "Artisanat"),
            ("professionnel", "Matériel professionnel"),
            ("divers", "Divers"),
        ],
    },
}

# Model field choices
CATEGORY_CHOICES = [(key, value["name"]) for key, value in CATEGORIES.items()]


def get_all_categories() -> List[Dict]:
    """List categories with their sub-category count."""
    return [
        {
            "id": key,
            "name": value["name"],
            "icon": value["icon"],
            "sub_categories_count": len(value["sub_categories"]),
        }
        for key, value in CATEGORIES.items()
    ]


def get_sub_categories(category_id: str) -> List[Dict]:
    """Sub-categories of one category (empty list for unknown ids)."""
    category = CATEGORIES.get(category_id)
    if not category:
        return []
    return [{"id": sub_id, "name": name} for sub_id, name in category["sub_categories"]]


def is_valid_category(category_id: str) -> bool:
    return category_id in CATEGORIES


def validate_category_and_sub_category(category_id: str, sub_category_id: str) -> bool:
    """True if the pair belongs to the taxonomy."""
    category = CATEGORIES.get(category_id)
    if not category:
        return False
    return any(sub_id == sub_category_id for sub_id, _ in category["sub_categories"])


def get_category_display_name(category_id: str, sub_category_id: Optional[str] = None) -> str:
    """Human label such as 'Électronique > Smartphones'."""
    category = CATEGORIES.get(category_id)
    if not category:
        return "Catégorie inconnue"

    if not sub_category_id:
        return category["name"]

    for sub_id, name in category["sub_categories"]:
        if sub_id == sub_category_id:
            return f"{category['name']} > {name}"

    return category["name"]
