"""
Pytest configuration and fixtures for the LAPSE explorer.

The sample corpus has three pieces of legislation and seven paragraphs:

====  =====  =======  ======================  ==================================
para  legis  section  domains                 notes
====  =====  =======  ======================  ==================================
1     L1     35       Fisheries               Mandatory
2     L1     35       Fisheries               Discretionary, Minister
3     L1     35       Pollution               discretionary, Minister
4     L1     36       Pollution; Water        MANDATORY
5     L2     6        Fisheries               regulation of the Fisheries Act
6     L3     (none)   (none)                  provincial
7     L9     1        Fisheries               unresolved legislation id
====  =====  =======  ======================  ==================================
"""

import os

import pandas as pd
import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app
os.environ["LAPSE_ENVIRONMENT"] = "test"
os.environ["LAPSE_DEBUG"] = "false"
os.environ.pop("LAPSE_DATA_DIR", None)

from lapse.config import load_config
from lapse.domain.keywords import GovernanceKeyword, IucnKeyword
from lapse.domain.legislation import Legislation
from lapse.domain.paragraph import Paragraph
from lapse.domain.source_tables import SourceTables
from lapse.services.explorer_service import LegislationExplorer
from lapse.services.join_service import JoinService
from lapse_api.app import app
from lapse_api.dependencies import get_explorer


@pytest.fixture
def config():
    """Load default config for tests."""
    return load_config()


@pytest.fixture
def legislation_records():
    return [
        Legislation(
            legislation_id="L1",
            jurisdiction="Federal",
            legislation_type="Act",
            act_name="Fisheries Act",
            legislation_name="Fisheries Act",
            url="https://laws.example.gc.ca/F-14",
            agencies="Fisheries and Oceans Canada",
            current_to_date="2024-12-01",
        ),
        Legislation(
            legislation_id="L2",
            jurisdiction="Federal",
            legislation_type="Regulation",
            act_name="Fisheries Act",
            legislation_name="Fishery (General) Regulations",
            url="https://laws.example.gc.ca/SOR-93-53",
            agencies="Fisheries and Oceans Canada",
            current_to_date="2024-11-15",
        ),
        Legislation(
            legislation_id="L3",
            jurisdiction="Provincial",
            legislation_type="Act",
            act_name="Water Sustainability Act",
            legislation_name="Water Sustainability Act",
            url="https://laws.example.bc.ca/14015",
            agencies="Ministry of Water, Land and Resource Stewardship",
            current_to_date="2024-10-01",
        ),
    ]


@pytest.fixture
def paragraph_records():
    return [
        Paragraph(
            paragraph_id="1",
            legislation_id="L1",
            section="35",
            heading="Harmful alteration",
            text=(
                "No person shall carry on any work that results in the harmful "
                "alteration of fish habitat or spawning grounds."
            ),
            management_domains=("Fisheries",),
            domain_keywords=("fish habitat",),
            clause_types=("Regulatory",),
            clause_keywords=("shall",),
            actionable_types=("Prohibition",),
            discretion_types=("Mandatory",),
        ),
        Paragraph(
            paragraph_id="2",
            legislation_id="L1",
            section="35",
            heading="Harmful alteration",
            text="Subsection (1) does not apply to a person who carries on a work authorized by the Minister.",
            management_domains=("Fisheries",),
            clause_types=("Enabling",),
            responsible_officials=("Minister",),
            discretion_types=("Discretionary",),
        ),
        Paragraph(
            paragraph_id="3",
            legislation_id="L1",
            section="35",
            heading="Exceptions",
            text="The Minister may consider the deposit of a deleterious substance in water frequented by fish.",
            management_domains=("Pollution",),
            domain_keywords=("deleterious substance",),
            clause_types=("Regulatory",),
            actionable_types=("Authorization",),
            responsible_officials=("Minister",),
            discretion_types=("discretionary",),
        ),
        Paragraph(
            paragraph_id="4",
            legislation_id="L1",
            section="36",
            heading="Deposit of deleterious substance",
            text=(
                "No person shall deposit a deleterious substance of any type in water "
                "frequented by fish, or near a stream."
            ),
            management_domains=("Pollution", "Water"),
            domain_keywords=("effluent",),
            clause_types=("Regulatory",),
            discretion_types=("MANDATORY",),
        ),
        Paragraph(
            paragraph_id="5",
            legislation_id="L2",
            section="6",
            heading="Close times",
            text="No person shall fish for salmon during the close time set out in the schedule.",
            management_domains=("Fisheries",),
            discretion_types=("Mandatory",),
        ),
        Paragraph(
            paragraph_id="6",
            legislation_id="L3",
            text="A person must not divert water from a stream without a water licence.",
            clause_types=("Regulatory",),
            discretion_types=("Mandatory",),
        ),
        Paragraph(
            paragraph_id="7",
            legislation_id="L9",
            section="1",
            text="This paragraph belongs to legislation that was never downloaded.",
            management_domains=("Fisheries",),
        ),
    ]


@pytest.fixture
def iucn_records():
    return [
        IucnKeyword(keyword="deleterious", threat="Pollution"),
        IucnKeyword(keyword="harmful alteration", threat="Natural system modifications"),
        IucnKeyword(keyword="salmon", threat="Biological resource use"),
    ]


@pytest.fixture
def governance_records():
    return [
        GovernanceKeyword(domain="Fisheries", keyword="spawning", scope="habitat"),
        GovernanceKeyword(domain="Fisheries", keyword="fish habitat", scope="habitat"),
        GovernanceKeyword(domain="Pollution", keyword="deleterious substance"),
        GovernanceKeyword(domain="Pollution", keyword="effluent"),
        GovernanceKeyword(domain="Water", keyword="stream"),
        GovernanceKeyword(domain="Water", keyword="water licence"),
    ]


@pytest.fixture
def sample_tables(paragraph_records, legislation_records, iucn_records, governance_records):
    """The four source tables of the sample corpus."""
    return SourceTables(
        paragraphs=paragraph_records,
        legislation=legislation_records,
        iucn_keywords=iucn_records,
        governance_keywords=governance_records,
    )


@pytest.fixture
def join_result(config, sample_tables):
    return JoinService(config).join(sample_tables)


@pytest.fixture
def flat_items(join_result):
    """Joined FlatItems, ids "1".."7"."""
    return join_result.items


@pytest.fixture
def explorer(config, sample_tables):
    """Explorer with the sample corpus loaded."""
    explorer = LegislationExplorer(config)
    explorer.load(sample_tables)
    return explorer


@pytest.fixture
def source_dir(tmp_path, config, paragraph_records, legislation_records, iucn_records, governance_records):
    """Directory holding the sample corpus as the four source CSV files."""
    def joined(values):
        return "; ".join(values)

    pd.DataFrame([
        {
            'paragraph_id': p.paragraph_id,
            'legislation_id': p.legislation_id,
            'section': p.section,
            'heading': p.heading,
            'paragraph': p.text,
            'management_domain': joined(p.management_domains),
            'mgmt_d_keyword': joined(p.domain_keywords),
            'clause_type': joined(p.clause_types),
            'clause_type_keyword': joined(p.clause_keywords),
            'actionable_type': joined(p.actionable_types),
            'responsible_official': joined(p.responsible_officials),
            'discretion_type': joined(p.discretion_types),
        }
        for p in paragraph_records
    ]).to_csv(tmp_path / config.ingestion.paragraphs_file, index=False)

    pd.DataFrame([
        {
            'legislation_id': r.legislation_id,
            'jurisdiction': r.jurisdiction,
            'legislation_type': r.legislation_type,
            'act_name': r.act_name,
            'legislation_name': r.legislation_name,
            'url': r.url,
            'agencies': r.agencies,
            'current_to_date': r.current_to_date,
        }
        for r in legislation_records
    ]).to_csv(tmp_path / config.ingestion.legislation_file, index=False)

    pd.DataFrame(
        [{'keyword': r.keyword, 'iucn_l2': r.threat} for r in iucn_records]
    ).to_csv(tmp_path / config.ingestion.iucn_keywords_file, index=False)

    pd.DataFrame(
        [{'management_domain': r.domain, 'keyword': r.keyword, 'scope': r.scope} for r in governance_records]
    ).to_csv(tmp_path / config.ingestion.governance_keywords_file, index=False)

    return tmp_path


@pytest.fixture
def client(explorer):
    """FastAPI test client serving the sample corpus."""
    app.dependency_overrides[get_explorer] = lambda: explorer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def empty_client(config):
    """FastAPI test client whose explorer has no corpus loaded."""
    empty = LegislationExplorer(config)
    app.dependency_overrides[get_explorer] = lambda: empty
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
