import matplotlib

# Tests save figures only, never show them
matplotlib.use("Agg")
