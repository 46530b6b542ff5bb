# Configuration for the STRING network clustering pipeline

from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
GENE_LIST_PATH = PROJECT_ROOT / 'data' / 'genes.txt'
RESULTS_DIR = PROJECT_ROOT / 'results'

# STRING
STRING_API_URL = "https://string-db.org/api"
STRING_CALLER_IDENTITY = "string_network_clusters"
SPECIES = 9606
REQUIRED_SCORE = 400  # 400 = medium confidence, 700 = high
NETWORK_TYPE = "functional"  # or "physical"

# Cytoscape (CyREST)
CYTOSCAPE_BASE_URL = "http://127.0.0.1:1234/v1"
NETWORK_TITLE = "STRING network"
NETWORK_COLLECTION = "STRING clusters"
STYLE_NAME = "default"
NODE_SHAPE = "ELLIPSE"
NODE_COLOR = "#89D0F5"
LAYOUT_PARAMS = {
    'defaultSpringCoefficient': 1e-5,
    'defaultSpringLength': 80,
    'defaultNodeMass': 3,
    'numIterations': 100,
}

# Clustering (clusterMaker2)
CLUSTER_ALGORITHM = "glay"
CLUSTER_FLAGS = {
    'createGroups': False,
    'showUI': False,
    'undirectedEdges': True,
    'selectedOnly': False,
}
CLUSTER_COLUMN = "__glayCluster"
CLUSTER_PALETTE = "husl"

# Enrichment
MIN_CLUSTER_SIZE = 5  # clusters must be strictly larger than this
GO_ASPECTS = {
    'BP': 'GO_Biological_Process_2023',
    'CC': 'GO_Cellular_Component_2023',
    'MF': 'GO_Molecular_Function_2023',
}
ENRICHR_ORGANISM = "human"
# GO_*_2023 libraries are published for these organisms only
ENRICHR_ORGANISMS = {9606: "human", 10090: "mouse"}
ENRICHMENT_CUTOFF = 0.05
DOTPLOT_TOP_TERMS = 10
