"""
PlantCare AI - Reference Data
Districts, months and plant categories offered by the pickers, plus stock captions.
"""

APP_NAME = "PlantCare AI"

KARNATAKA_DISTRICTS = [
    "Bagalkot", "Ballari (Bellary)", "Belagavi (Belgaum)", "Bengaluru Rural",
    "Bengaluru Urban", "Bidar", "Chamarajanagar", "Chikballapur",
    "Chikkamagaluru", "Chitradurga", "Dakshina Kannada", "Davanagere",
    "Dharwad", "Gadag", "Hassan", "Haveri", "Kalaburagi (Gulbarga)",
    "Kodagu", "Kolar", "Koppal", "Mandya", "Mysuru (Mysore)",
    "Raichur", "Ramanagara", "Shivamogga (Shimoga)", "Tumakuru (Tumkur)",
    "Udupi", "Uttara Kannada", "Vijayapura (Bijapur)", "Yadgir",
]

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

PLANT_CATEGORIES = {
    "Fruits":            ["Apple", "Banana", "Coconut", "Guava", "Mango", "Papaya", "Pomegranate"],
    "Vegetables":        ["Tomato", "Potato", "Onion", "Eggplant", "Cucumber", "Cauliflower"],
    "Pulses":            ["Pigeon Pea", "Black Gram", "Green Gram", "Chickpea", "Horse Gram"],
    "Cereals & Millets": ["Rice", "Wheat", "Maize", "Sorghum", "Millet", "Foxtail Millet"],
    "Spices":            ["Chilli Pepper", "Turmeric", "Ginger", "Cardamom", "Black Pepper"],
    "Commercial Crops":  ["Cotton", "Sugarcane", "Coffee", "Tea", "Groundnut", "Rubber"],
    "Ornamental Plants": ["Rose", "Marigold", "Orchid", "Hibiscus", "Jasmine"],
    "Medicinal Plants":  ["Neem", "Tulsi (Holy Basil)", "Aloe Vera", "Ashwagandha", "Moringa"],
    "Herbs":             ["Basil", "Mint", "Coriander", "Curry Leaf", "Fenugreek"],
}

DEFAULT_CAPTIONS = [
    "Nature's masterpiece 🌱",
    "Green therapy for the soul",
    "Plant power!",
    "Leafy love",
    "A touch of green magic",
    "Rooted in beauty",
    "Sun-kissed leaves",
    "Fresh air, fresh vibes",
    "Plant parent goals",
    "Jungle vibes at home",
    "Sprouting happiness",
    "Botanical bliss",
    "Chlorophyll dreams",
    "Serenity in green",
    "Flourishing friends",
    "Tiny forests, big joy",
    "Grow through what you go through",
    "Earth's little wonders",
]

# Speech-to-text is limited to these for better accuracy
STT_LANGUAGE_CODES = ["en-US", "hi-IN", "kn-IN", "te-IN", "ta-IN"]
