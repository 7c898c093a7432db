# Routes package init
"""
TouristMap Backend: API Routes Package
========================================

Route Inventory:
    - pins.py:    GET    /                    (liveness)
                  POST   /add_pin             (create a pin)
                  GET    /get_pins            (list pins)
                  GET    /get_pin/{id}        (single pin)
                  POST   /add_rate            (rate a pin)
                  DELETE /delete_pin/{id}     (delete a pin and its ratings)
    - health.py:  GET    /health              (service health check)

Routes stay thin: decode the request, call PinService, shape the response.
"""
