from weather_route.main import run

run()
