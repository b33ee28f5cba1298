"""
Weather along a driving route.

The route from the Directions API is decoded into a time-stamped trace,
thinned to one point every few miles, and each point is paired with the
forecast for the hour the traveller gets there.
"""
