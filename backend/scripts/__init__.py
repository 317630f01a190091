"""Developer scripts for the shop estimator backend."""
