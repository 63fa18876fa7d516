"""
Reading Adventure - Built-in Game Content

Static game definitions that init_db.py seeds into the content store.
The games themselves always read content back from the store; these
dicts are only the source for seeding.

Adventure paths are keyed "{round}-{option}" in the stored document.
"""

from config import ADVENTURE, SENTENCE_BUILDER


# =============================================================================
# THE ENCHANTED FOREST ADVENTURE
# =============================================================================

ADVENTURE_ROUNDS = [
    {
        "round": 1,
        "scene": "You stand at the entrance of a mysterious forest. The trees seem to whisper secrets.",
        "tip": "Choose your path wisely, brave adventurer.",
        "options": [
            {"id": 1, "text": "🚶 Enter the forest cautiously"},
            {"id": 2, "text": "🏃 Run boldly into the forest"},
            {"id": 3, "text": "🗺️ Consult your map first"},
        ],
    },
    {
        "round": 2,
        "scene": "You discover a bubbling brook with crystal clear water. Your throat is parched from traveling.",
        "tip": "Water is essential for any journey.",
        "options": [
            {"id": 1, "text": "🥤 Drink from the brook"},
            {"id": 2, "text": "🧪 Test the water first"},
            {"id": 3, "text": "🚶 Ignore it and continue"},
        ],
    },
    {
        "round": 3,
        "scene": "A small cottage appears between the trees. Smoke rises from its chimney.",
        "tip": "Locals might offer valuable information or items.",
        "options": [
            {"id": 1, "text": "🚪 Knock on the door"},
            {"id": 2, "text": "👀 Peek through the window"},
            {"id": 3, "text": "🚶 Avoid the cottage"},
        ],
    },
    {
        "round": 4,
        "scene": "You encounter an old wizard sitting on a tree stump, reading an ancient book.",
        "tip": "The wise often share knowledge with those who ask respectfully.",
        "options": [
            {"id": 1, "text": "👋 Greet the wizard"},
            {"id": 2, "text": "📚 Ask about the book"},
            {"id": 3, "text": "🎒 Offer an item from your pack"},
        ],
    },
    {
        "round": 5,
        "scene": "A fork in the path presents itself. One way is dark but direct, the other is bright but winding.",
        "tip": "Sometimes the longer path is safer.",
        "options": [
            {"id": 1, "text": "🌑 Take the dark path"},
            {"id": 2, "text": "☀️ Take the bright path"},
            {"id": 3, "text": "🧭 Check your compass"},
        ],
    },
    {
        "round": 6,
        "scene": "You find a chest partially buried under a fallen tree.",
        "tip": "Fortune favors the bold, but caution keeps you alive.",
        "options": [
            {"id": 1, "text": "🔓 Open the chest immediately"},
            {"id": 2, "text": "🔍 Examine it for traps"},
            {"id": 3, "text": "⚔️ Break it open with force"},
        ],
    },
    {
        "round": 7,
        "scene": "A magnificent deer with glowing antlers blocks your path. It stares at you intently.",
        "tip": "Forest creatures often have deep connections to magic.",
        "options": [
            {"id": 1, "text": "🍎 Offer it food"},
            {"id": 2, "text": "🧎 Bow respectfully"},
            {"id": 3, "text": "🚶 Try to walk around it"},
        ],
    },
    {
        "round": 8,
        "scene": "You reach a clearing with an ancient stone pedestal in the center. Three objects rest upon it.",
        "tip": "Your final choice will determine your fate.",
        "options": [
            {"id": 1, "text": "👑 Take the golden crown"},
            {"id": 2, "text": "📜 Take the ancient scroll"},
            {"id": 3, "text": "🔑 Take the silver key"},
        ],
    },
]

ADVENTURE_PATHS = {
    # Round 1
    "1-1": {
        "message": "You carefully enter the forest, staying alert. You find a hidden path!",
        "nextRound": 2,
        "effect": "gain",
        "item": "compass",
    },
    "1-2": {
        "message": "You trip over a root and hurt yourself. Be more careful next time!",
        "nextRound": 2,
        "effect": "lose",
        "hearts": 1,
    },
    "1-3": {
        "message": "Smart thinking! Your map reveals a safe route through the forest.",
        "nextRound": 2,
        "effect": "gain",
        "hearts": 1,
    },
    # Round 2
    "2-1": {
        "message": "The water is refreshing and magical! You feel invigorated.",
        "nextRound": 3,
        "effect": "gain",
        "hearts": 1,
    },
    "2-2": {
        "message": "Good call! The water was enchanted, but it's safe to drink.",
        "nextRound": 3,
        "effect": "gain",
        "item": "water flask",
    },
    "2-3": {
        "message": "You continue your journey, but your thirst grows worse.",
        "nextRound": 3,
        "effect": "lose",
        "hearts": 1,
    },
    # Round 3
    "3-1": {
        "message": "A friendly old woman invites you in and gives you a magical cookie!",
        "nextRound": 4,
        "effect": "gain",
        "item": "magic cookie",
    },
    "3-2": {
        "message": "You see strange shadows moving inside. Maybe it's best not to knock.",
        "nextRound": 4,
        "effect": "none",
    },
    "3-3": {
        "message": "As you walk away, you hear a cackle from inside. You made a safe choice.",
        "nextRound": 4,
        "effect": "gain",
        "hearts": 1,
    },
    # Round 4
    "4-1": {
        "message": "The wizard smiles and gives you a protective charm.",
        "nextRound": 5,
        "effect": "gain",
        "item": "protection charm",
    },
    "4-2": {
        "message": "The wizard shows you the book of forest secrets. You learn valuable knowledge!",
        "nextRound": 5,
        "effect": "gain",
        "item": "forest knowledge",
    },
    "4-3": {
        "message": "The wizard is offended by your offer and disappears in a puff of smoke.",
        "nextRound": 5,
        "effect": "lose",
        "hearts": 1,
    },
    # Round 5
    "5-1": {
        "message": "The dark path is full of thorns that scratch you, but it saves time.",
        "nextRound": 6,
        "effect": "lose",
        "hearts": 2,
    },
    "5-2": {
        "message": "The bright path is longer but pleasant. You find healing berries along the way!",
        "nextRound": 6,
        "effect": "gain",
        "hearts": 2,
        "item": "healing berries",
    },
    "5-3": {
        "message": "Your compass reveals a hidden third path that's both safe and direct!",
        "nextRound": 6,
        "effect": "gain",
        "hearts": 1,
    },
    # Round 6
    "6-1": {
        "message": "The chest was trapped! A cloud of poison gas escapes.",
        "nextRound": 7,
        "effect": "lose",
        "hearts": 2,
    },
    "6-2": {
        "message": "You find and disarm a trap, then safely open the chest to find a magic sword!",
        "nextRound": 7,
        "effect": "gain",
        "item": "magic sword",
    },
    "6-3": {
        "message": "You smash the chest open. Inside is a potion, but you broke half of it!",
        "nextRound": 7,
        "effect": "gain",
        "item": "half potion",
    },
    # Round 7
    "7-1": {
        "message": "The deer accepts your offering and leads you to a secret grove with healing spring.",
        "nextRound": 8,
        "effect": "gain",
        "hearts": 2,
    },
    "7-2": {
        "message": "The deer bows in return and grants you passage. You feel blessed!",
        "nextRound": 8,
        "effect": "gain",
        "item": "forest blessing",
    },
    "7-3": {
        "message": "The deer blocks your path. You must turn back and take a longer route.",
        "nextRound": 8,
        "effect": "lose",
        "hearts": 1,
    },
    # Round 8 (endings)
    "8-1": {
        "message": "The crown glows as you take it. You are now the rightful ruler of the forest kingdom!",
        "nextRound": -1,
        "effect": "win",
        "score": "crown",
    },
    "8-2": {
        "message": "The scroll contains ancient spells. You've become a guardian of forest wisdom!",
        "nextRound": -1,
        "effect": "win",
        "score": "wisdom",
    },
    "8-3": {
        "message": "The key opens a hidden door back to your world. You return home safely with treasures!",
        "nextRound": -1,
        "effect": "win",
        "score": "home",
    },
}

# =============================================================================
# SENTENCE BUILDER
# =============================================================================

SENTENCES = [
    {"id": 1, "words": ["The", "cat", "sleeps", "on", "the", "mat"], "correct": "The cat sleeps on the mat"},
    {"id": 2, "words": ["She", "reads", "a", "book", "every", "day"], "correct": "She reads a book every day"},
    {"id": 3, "words": ["They", "play", "soccer", "in", "the", "park"], "correct": "They play soccer in the park"},
    {"id": 4, "words": ["The", "dog", "barks", "at", "the", "mailman"], "correct": "The dog barks at the mailman"},
    {"id": 5, "words": ["We", "eat", "dinner", "together", "at", "home"], "correct": "We eat dinner together at home"},
    {"id": 6, "words": ["Birds", "fly", "high", "in", "the", "sky"], "correct": "Birds fly high in the sky"},
    {"id": 7, "words": ["Children", "build", "sandcastles", "on", "the", "beach"], "correct": "Children build sandcastles on the beach"},
    {"id": 8, "words": ["I", "write", "letters", "to", "my", "friend"], "correct": "I write letters to my friend"},
    {"id": 9, "words": ["She", "sings", "beautiful", "songs", "at", "concerts"], "correct": "She sings beautiful songs at concerts"},
    {"id": 10, "words": ["Teachers", "help", "students", "learn", "new", "things"], "correct": "Teachers help students learn new things"},
]

# =============================================================================
# DEFINITIONS BY GAME TYPE
# =============================================================================

GAME_DEFINITIONS = {
    ADVENTURE: {
        "game_type": ADVENTURE,
        "title": "The Enchanted Forest Adventure",
        "content": {"rounds": ADVENTURE_ROUNDS, "paths": ADVENTURE_PATHS},
    },
    SENTENCE_BUILDER: {
        "game_type": SENTENCE_BUILDER,
        "title": "Sentence Builder",
        "content": {"sentences": SENTENCES},
    },
}
