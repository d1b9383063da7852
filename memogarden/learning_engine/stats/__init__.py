"""Timezone-anchored statistics windows and maturity histograms."""
