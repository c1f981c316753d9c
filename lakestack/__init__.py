# -----------------------------------------------------------------------------
# LAKESTACK
# -----------------------------------------------------------------------------
# Generates and runs a MinIO + Nessie + Trino data-lake stack, either as a
# local Docker Compose project or as a Kustomize tree deployed by Argo CD.
# -----------------------------------------------------------------------------

__version__ = "1.0.0"
