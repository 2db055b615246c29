# simulations/__init__.py
"""
Timing and equivalence benchmarks for sample-mean strategies.

Run the full table via:
    python -m simulations.compare --n 9 --reps 1000 --repetitions 20 --seed 123
or a head-to-head comparison via:
    python -m simulations.compare --method-a matrix_reduce --method-b axis_apply --plot
"""
