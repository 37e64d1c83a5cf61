# Constants shared by the API, the TMDB adapter and the seed pipeline

# TMDB locales tried in order when searching a title, and the language codes the frontend knows about
SUPPORTED_TMDB_LANGUAGES = ['en-US', 'hi-IN', 'mr-IN', 'ta-IN', 'te-IN', 'ml-IN', 'kn-IN', 'bn-IN', 'gu-IN', 'pa-IN', 'ur-PK']
BACKEND_SUPPORTED_LANGUAGES = ['en', 'hi', 'ta', 'te', 'ml', 'kn', 'bn', 'mr', 'gu', 'pa', 'ur']
# Order used by the /api/tmdb/search proxy
TMDB_SEARCH_LANGUAGES = ['en', 'hi', 'ta', 'te', 'ml', 'mr', 'kn', 'bn', 'gu', 'pa', 'ur']
DEFAULT_LANGUAGE = 'en'

# Image sizes used when building poster and cast photo urls
POSTER_SIZE = 'w500'
PROFILE_SIZE = 'w185'
MAX_CAST_MEMBERS = 10
YOUTUBE_WATCH_URL = 'https://www.youtube.com/watch?v='

# Seat map shared by every screen
SEAT_ROWS = ['A', 'B', 'C', 'D']
SEAT_COLS = [1, 2, 3, 4, 5, 6]
ALL_SEATS = [f"{row}{col}" for row in SEAT_ROWS for col in SEAT_COLS]
MAX_RANDOM_BLOCKED_SEATS = 9

# Daily show slots (HH:MM) and default screen
DAILY_SHOW_TIMES = ['10:00', '13:30', '17:00', '21:30']
DEFAULT_SCREEN = 'Screen 1'

# Movie / theater status values
STATUS_NOW_SHOWING = 'Now Showing'
STATUS_COMING_SOON = 'Coming Soon'
THEATER_STATUS_ACTIVE = 'Active'
NOT_AVAILABLE = 'N/A'

# Number of theaters linked to an admin-created movie when none are given
DEFAULT_THEATERS_FOR_NEW_MOVIE = 4

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_PAGE = 100_000
DEFAULT_USERS_PAGE_SIZE = 50

# Titles fetched from TMDB by the seed script
MOVIE_TITLES_TO_SEED = [
    'Oppenheimer', 'Barbie', 'Jawan', 'Guardians of the Galaxy Vol. 3',
    'Spider-Man: Across the Spider-Verse', 'Avatar: Fire and Ash',
    'The Conjuring: Last Rites', 'Demon Slayer: Kimetsu no Yaiba Infinity Castle',
    'F1', 'Final Destination Bloodlines', 'Harry Potter and the Prisoner of Azkaban',
    'Harry Potter and the Goblet of Fire', 'Avengers: Doomsday', 'The Batman Beyond',
    'Dashavatar',
]

# Theaters every seeded movie is linked to
SEED_THEATERS = [
    # Mumbai
    {'name': 'PVR Phoenix Kurla', 'location': 'Mumbai'},
    {'name': 'INOX R City', 'location': 'Ghatkopar, Mumbai'},
    {'name': 'NY Cinemas Mulund', 'location': 'Mulund, Mumbai'},
    {'name': 'R Mall Mulund', 'location': 'Mulund, Mumbai'},
    # Thane
    {'name': 'Cinépolis - Korum Mall', 'location': 'Thane'},
    {'name': 'INOX - Viviana Mall', 'location': 'Thane'},
    {'name': 'PVR - Lake City Mall', 'location': 'Thane'},
    # Navi Mumbai
    {'name': 'INOX - Raghuleela Mall', 'location': 'Navi Mumbai'},
    {'name': 'Cinépolis - Nexus Seawoods Mall', 'location': 'Navi Mumbai'},
    {'name': 'Miraj Cinemas - Panvel', 'location': 'Navi Mumbai'},
    {'name': 'PVR - Orion Mall', 'location': 'Navi Mumbai'},
]

# Movies inserted by hand when TMDB has nothing for them (release_date as YYYY-MM-DD)
FALLBACK_MOVIES = [
    {
        'title': 'Dashavatar',
        'description': 'A Marathi mythological epic.',
        'genre': 'Mythology',
        'rating': 8.2,
        'duration': '150 min',
        'poster_url': 'https://yourcdn.com/dashavatar.jpg',
        'trailer_url': 'https://www.youtube.com/watch?v=yourTrailerId',
        'release_date': '2025-09-25',
        'language': 'mr',
        'tags': ['Marathi', 'Epic'],
        'is_featured': True,
        'status': STATUS_NOW_SHOWING,
    },
]
