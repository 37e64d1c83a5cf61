"""
API Routers - HTTP endpoint handlers

Each router handles a specific domain of functionality:
- movies: Browse, filter and create movies
- theaters: Theaters and their showtimes
- admin: Admin panel (movies, bookings, users, stats)
- users: User profiles
- bookings: Seat bookings
- payments: Booking payments
- tmdb: TMDB lookups for the admin movie form
- health: Health checks
"""
