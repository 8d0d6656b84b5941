from . import (
    bookings as bookings,
    health as health,
    instruments as instruments,
    schedule as schedule,
    statistics as statistics,
    users as users,
)
