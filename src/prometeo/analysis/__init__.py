"""Signal analysis utilities (rates, spectra, bands, normalization, outputs).

This package gathers pure-Python helpers that operate on NumPy arrays of
centered EEG samples. Modules such as :mod:`fft`, :mod:`bands`,
:mod:`spectral`, and :mod:`normalizer` stay free of transport and UI
dependencies so they can be reused in command-line replay, automated tests,
or a live visualization alike.
"""
