"""Command-line tools and debug helpers.

``prometeo-simulate`` writes synthetic headset captures, ``prometeo-replay``
runs a capture through the pipeline and tabulates the band powers, and
:mod:`debug` holds the opt-in timing hooks used by the spectral estimator.
"""
