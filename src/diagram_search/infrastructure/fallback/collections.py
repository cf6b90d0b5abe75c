"""
Offline fallback collections.

Each topic collection is a fixed, ordered list of curated images with
the keywords that route a query to it. Collections are checked in the
order of ``DEFAULT_COLLECTIONS``; the first whose keywords match wins.
Every collection holds at least a full page of templates; photos may
appear in more than one topic under a topic-specific title.
"""

from __future__ import annotations

from dataclasses import dataclass

UNSPLASH_URL = "https://images.unsplash.com/photo-{photo_id}?auto=format&fit=crop&w=970&h=700"


@dataclass(frozen=True)
class FallbackTemplate:
    """One curated offline image."""

    title: str
    photo_id: str
    tags: tuple[str, ...]
    author: str = "Unsplash"

    @property
    def image_location(self) -> str:
        return UNSPLASH_URL.format(photo_id=self.photo_id)


@dataclass(frozen=True)
class FallbackCollection:
    """Named, keyword-routed list of templates."""

    name: str
    keywords: frozenset[str]
    templates: tuple[FallbackTemplate, ...]

    def __len__(self) -> int:
        return len(self.templates)

    def matches(self, tokens: set[str], normalized_query: str) -> bool:
        for keyword in self.keywords:
            if " " in keyword:
                if keyword in normalized_query:
                    return True
            elif keyword in tokens:
                return True
        return False


def _t(title: str, photo_id: str, *tags: str) -> FallbackTemplate:
    return FallbackTemplate(title=title, photo_id=photo_id, tags=tags)


NETWORK = FallbackCollection(
    name="network",
    keywords=frozenset({
        "network", "networking", "topology", "lan", "wan", "router", "cloud",
        "infrastructure", "server", "internet", "tcp", "osi",
    }),
    templates=(
        _t("Network Topology Overview", "1558494949-ef010cbdcc31", "network", "topology", "infrastructure"),
        _t("Server Rack Infrastructure", "1518770660439-4636190af475", "network", "server", "datacenter"),
        _t("Connected Devices Network", "1516321318423-f06f85e504b3", "network", "internet", "connectivity"),
        _t("Cloud Network Architecture", "1496065187959-7f07b8353c55", "network", "cloud", "architecture"),
        _t("Network Cabling Layout", "1535378273068-9bb67d5bbc41", "network", "lan", "hardware"),
        _t("Distributed System Architecture", "1581092918056-0c4c3acd3789", "network", "architecture", "system"),
        _t("Network Hardware Board", "1620712943543-bcc4688e7485", "network", "hardware", "circuit"),
        _t("Network Monitoring Dashboard", "1551288049-bebda4e38f71", "network", "monitoring", "dashboard"),
        _t("Packet Flow Whiteboard", "1552664730-d307ca884978", "network", "packet", "flow"),
        _t("Network Lab Equipment", "1581091879641-197604d8bfed", "network", "lab", "equipment"),
    ),
)

FLOWCHART = FallbackCollection(
    name="flowchart",
    keywords=frozenset({
        "flowchart", "flow", "decision", "algorithm", "workflow", "logic",
        "pseudocode", "swimlane", "data flow",
    }),
    templates=(
        _t("Whiteboard Flowchart Planning", "1552664730-d307ca884978", "flowchart", "planning", "whiteboard"),
        _t("Process Flow Sketch", "1501084817091-a4f3d1d19e07", "flowchart", "process", "sketch"),
        _t("Decision Tree Workflow", "1488190211105-8b0e65b80b4e", "flowchart", "decision", "workflow"),
        _t("Algorithm Flow Diagram", "1532012197267-da84d127e765", "flowchart", "algorithm", "diagram"),
        _t("Team Workflow Mapping", "1507668077129-56e32842fceb", "flowchart", "workflow", "team"),
        _t("Pipeline Flow Notes", "1501504905252-473c47e087f8", "flowchart", "pipeline", "sequence"),
        _t("Step Flow Procedure", "1523821741446-edb2b68bb7a0", "flowchart", "steps", "procedure"),
        _t("Strategy Decision Chart", "1542744173-8e7e53415bb0", "flowchart", "decision", "strategy"),
        _t("Logic Flow on Screen", "1460925895917-afdab827c52f", "flowchart", "logic", "screen"),
        _t("Process Stages Flow", "1434030216411-0b793f4b4173", "flowchart", "process", "stages"),
    ),
)

ENTITY_RELATION = FallbackCollection(
    name="entity-relation",
    keywords=frozenset({
        "er", "erd", "entity", "relationship", "relational", "database", "schema",
        "sql", "uml", "class", "table", "entity relationship",
    }),
    templates=(
        _t("Database Schema Design", "1551288049-bebda4e38f71", "database", "schema", "erd"),
        _t("Entity Relationship Model", "1460925895917-afdab827c52f", "entity", "relationship", "model"),
        _t("Data Model on Screen", "1497316730643-415fac54a2af", "database", "data", "model"),
        _t("Relational Tables Sketch", "1526778548025-fa2f459cd5ce", "database", "tables", "relational"),
        _t("UML Class Structure", "1516110833967-0b5716ca1387", "uml", "class", "software"),
        _t("Data Modeling Workshop", "1507668077129-56e32842fceb", "database", "modeling", "team"),
        _t("Class Diagram Blueprint", "1503387762-592deb58ef4e", "uml", "class", "blueprint"),
        _t("Query Results Dashboard", "1543286386-713bdd548da4", "database", "sql", "dashboard"),
        _t("Table Layout Planning", "1519501025264-65ba15a82390", "database", "table", "planning"),
        _t("Data Architecture Sketch", "1581092918056-0c4c3acd3789", "database", "architecture", "data"),
    ),
)

PROCESS = FallbackCollection(
    name="process",
    keywords=frozenset({
        "process", "lifecycle", "cycle", "pipeline", "sequence", "stages",
        "steps", "timeline", "procedure",
    }),
    templates=(
        _t("Process Stages Board", "1434030216411-0b793f4b4173", "process", "stages", "planning"),
        _t("Lifecycle Cycle Diagram", "1454165804606-c3d57bc86b40", "process", "lifecycle", "cycle"),
        _t("Pipeline Sequence Notes", "1501504905252-473c47e087f8", "process", "pipeline", "sequence"),
        _t("Project Timeline Plan", "1519501025264-65ba15a82390", "process", "timeline", "project"),
        _t("Step by Step Procedure", "1523821741446-edb2b68bb7a0", "process", "steps", "procedure"),
        _t("Workflow Process Sketch", "1501084817091-a4f3d1d19e07", "process", "workflow", "sketch"),
        _t("Decision Process Tree", "1488190211105-8b0e65b80b4e", "process", "decision", "tree"),
        _t("Assembly Process Drawing", "1581091226825-a6a2a5aee158", "process", "assembly", "manufacturing"),
        _t("Sales Pipeline Funnel", "1542744095-fcf48d80b0fd", "process", "pipeline", "funnel"),
        _t("Research Process Lab", "1532094349884-543bc11b234d", "process", "research", "lab"),
    ),
)

EDUCATION = FallbackCollection(
    name="education",
    keywords=frozenset({
        "education", "educational", "learning", "concept", "mind", "study",
        "teaching", "lesson", "classroom", "student", "mind map", "concept map",
    }),
    templates=(
        _t("Classroom Concept Board", "1503676260728-1c00da094a0b", "education", "concept", "classroom"),
        _t("Study Notes Mind Map", "1532938911079-1b06ac7ceec7", "education", "study", "mind map"),
        _t("Teaching Diagram Lesson", "1524661135-423995f22d0b", "education", "teaching", "lesson"),
        _t("Learning Materials Layout", "1564325724739-bae0bd08762c", "education", "learning", "materials"),
        _t("Student Visual Summary", "1571171637578-41bc2dd41cd2", "education", "student", "summary"),
        _t("Biology Lesson Study", "1576091160550-2173dba999ef", "education", "biology", "lesson"),
        _t("Anatomy Teaching Chart", "1530497610245-94d3c16cda28", "education", "anatomy", "teaching"),
        _t("Concept Planning Whiteboard", "1552664730-d307ca884978", "education", "concept", "whiteboard"),
        _t("Molecule Learning Model", "1579546928937-641f7ac9bced", "education", "chemistry", "model"),
        _t("Group Study Session", "1521295121783-8a321d551ad2", "education", "study", "group"),
    ),
)

ENGINEERING = FallbackCollection(
    name="engineering",
    keywords=frozenset({
        "engineering", "circuit", "electrical", "electronic", "mechanical",
        "architecture", "system", "blueprint", "cad", "schematic", "software",
    }),
    templates=(
        _t("Circuit Board Schematic", "1620712943543-bcc4688e7485", "engineering", "circuit", "electronics"),
        _t("Engineering Blueprint", "1503387762-592deb58ef4e", "engineering", "blueprint", "design"),
        _t("Mechanical Assembly Drawing", "1581091226825-a6a2a5aee158", "engineering", "mechanical", "assembly"),
        _t("System Architecture Sketch", "1581092918056-0c4c3acd3789", "engineering", "system", "architecture"),
        _t("Electronics Lab Prototype", "1581091879641-197604d8bfed", "engineering", "electronics", "prototype"),
        _t("Server Infrastructure Design", "1518770660439-4636190af475", "engineering", "server", "infrastructure"),
        _t("Software Algorithm Diagram", "1532012197267-da84d127e765", "engineering", "software", "algorithm"),
        _t("Cloud System Architecture", "1496065187959-7f07b8353c55", "engineering", "cloud", "architecture"),
        _t("UML Software Design", "1516110833967-0b5716ca1387", "engineering", "uml", "software"),
        _t("Cabling Schematic Layout", "1535378273068-9bb67d5bbc41", "engineering", "schematic", "cabling"),
    ),
)

BUSINESS = FallbackCollection(
    name="business",
    keywords=frozenset({
        "business", "marketing", "strategy", "organization", "organizational",
        "org", "swot", "funnel", "sales", "management", "finance", "org chart",
    }),
    templates=(
        _t("Business Strategy Chart", "1542744173-8e7e53415bb0", "business", "strategy", "chart"),
        _t("Marketing Funnel Analytics", "1542744095-fcf48d80b0fd", "business", "marketing", "funnel"),
        _t("Organization Planning Session", "1521295121783-8a321d551ad2", "business", "organization", "planning"),
        _t("Financial Growth Dashboard", "1543286386-713bdd548da4", "business", "finance", "dashboard"),
        _t("Management Meeting Board", "1577401239170-897942555fb3", "business", "management", "meeting"),
        _t("Team Workflow Strategy", "1507668077129-56e32842fceb", "business", "workflow", "team"),
        _t("Project Timeline Roadmap", "1519501025264-65ba15a82390", "business", "timeline", "roadmap"),
        _t("Business Process Stages", "1434030216411-0b793f4b4173", "business", "process", "stages"),
        _t("Market Data Analytics", "1460925895917-afdab827c52f", "business", "analytics", "data"),
        _t("Lifecycle Planning Meeting", "1454165804606-c3d57bc86b40", "business", "lifecycle", "planning"),
    ),
)

SCIENCE = FallbackCollection(
    name="science",
    keywords=frozenset({
        "science", "scientific", "biology", "chemistry", "physics", "anatomy",
        "cell", "brain", "molecule", "dna", "photosynthesis", "atom",
    }),
    templates=(
        _t("Laboratory Science Setup", "1532094349884-543bc11b234d", "science", "laboratory", "chemistry"),
        _t("Molecular Structure Model", "1579546928937-641f7ac9bced", "science", "molecule", "chemistry"),
        _t("Microscope Biology Study", "1576091160550-2173dba999ef", "science", "biology", "microscope"),
        _t("Human Anatomy Illustration", "1530497610245-94d3c16cda28", "science", "anatomy", "biology"),
        _t("DNA Double Helix Model", "1582719471384-894fbb16e074", "science", "dna", "genetics"),
        _t("Cell Biology Lesson", "1503676260728-1c00da094a0b", "science", "cell", "classroom"),
        _t("Scientific Study Notes", "1532938911079-1b06ac7ceec7", "science", "study", "notes"),
        _t("Physics Circuit Experiment", "1620712943543-bcc4688e7485", "science", "physics", "circuit"),
        _t("Science Learning Materials", "1564325724739-bae0bd08762c", "science", "learning", "materials"),
        _t("Research Visual Summary", "1571171637578-41bc2dd41cd2", "science", "research", "summary"),
    ),
)

DEFAULT_COLLECTIONS: tuple[FallbackCollection, ...] = (
    NETWORK,
    FLOWCHART,
    ENTITY_RELATION,
    PROCESS,
    EDUCATION,
    ENGINEERING,
    BUSINESS,
    SCIENCE,
)
