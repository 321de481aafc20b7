import pytest

from common.errors import ValidationError
from state.models import ConfigGroup, OptionSource
from submission.assembler import endpoint_url, option_request
from submission.validation import to_int, to_number

from tests.conftest import make_check


@pytest.fixture
def database_ready(store):
    store.update(ConfigGroup.DATABASE, {
        "engine_id": "azure_sql",
        "connection_name": " compliance-prod ",
        "server_name": "sql01.database.windows.net",
        "database_name": "compliance",
        "port": "1433",
        "user_name": "auditor",
        "password": "s3cret",
    })
    return store


@pytest.fixture
def llm_ready(store):
    store.update(ConfigGroup.LLM, {"provider": "OpenAI", "model_name": "gpt-4"})
    return store


def violation(assembler, operation, **extra):
    with pytest.raises(ValidationError) as exc_info:
        assembler.build(operation, **extra)
    return exc_info.value


class TestNumberParsing:

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "nan", "inf", "-inf", None, "1,5"])
    def test_rejected_numbers(self, raw):
        assert to_number(raw) is None

    def test_accepted_numbers(self):
        assert to_number(" 0.5 ") == 0.5
        assert to_int("12") == 12
        assert to_int("12.0") == 12
        assert to_int("12.5") is None


class TestEndpoints:

    def test_checks_url_encodes_use_case(self):
        request = option_request(OptionSource.CHECKS, use_case="dormancy review/2024")
        assert request.method == "GET"
        assert request.target.endswith("/get_checks/dormancy%20review%2F2024")

    def test_checks_need_a_use_case(self):
        with pytest.raises(ValueError):
            option_request(OptionSource.CHECKS)

    def test_plain_option_url(self):
        assert endpoint_url("database_options").endswith("/db/databases")

    def test_unknown_operation(self, assembler):
        with pytest.raises(ValueError, match="Unknown operation"):
            assembler.build("drop_tables")


class TestSaveConnection:

    def test_payload(self, assembler, database_ready):
        request = assembler.build("save_connection")

        assert request.method == "POST"
        assert request.encoding == "json"
        assert request.target.endswith("/db/connections/save")
        assert request.body["connection_name"] == "compliance-prod"
        assert request.body["database_type"] == "azure_sql"
        assert request.body["port"] == 1433
        assert request.body["username"] == "auditor"
        assert request.body["connect_immediately"] is True

    def test_missing_password(self, assembler, database_ready):
        database_ready.update(ConfigGroup.DATABASE, {"password": ""})
        error = violation(assembler, "save_connection")

        assert error.field == "password"
        assert error.message == "Please fill in all required database connection fields, including password."

    def test_whitespace_counts_as_missing(self, assembler, database_ready):
        database_ready.update(ConfigGroup.DATABASE, {"server_name": "   "})
        assert violation(assembler, "save_connection").field == "server_name"

    @pytest.mark.parametrize("port", ["abc", "NaN", "14 33"])
    def test_port_must_be_a_number(self, assembler, database_ready, port):
        database_ready.update(ConfigGroup.DATABASE, {"port": port})
        error = violation(assembler, "save_connection")
        assert error.field == "port"
        assert error.message == "Port Number must be a valid number."

    def test_first_violation_wins(self, assembler, store):
        store.update(ConfigGroup.DATABASE, {"port": "abc"})
        error = violation(assembler, "save_connection")
        assert error.field == "engine_id"


class TestEnableLlm:

    def test_payload(self, assembler, llm_ready):
        request = assembler.build("enable_llm")
        assert request.target.endswith("/llm/generate")
        assert request.body == {
            "model_type": "openai",
            "model_name": "gpt-4",
            "prompt": "what is compliance",
            "max_tokens": 1000,
            "temperature": 0.2,
        }

    @pytest.mark.parametrize("temperature", ["0", "1", "0.5", "1.0"])
    def test_temperature_bounds_accepted(self, assembler, llm_ready, temperature):
        llm_ready.update(ConfigGroup.LLM, {"temperature": temperature})
        assert assembler.build("enable_llm").body["temperature"] == float(temperature)

    @pytest.mark.parametrize("temperature", ["-0.01", "1.01", "warm"])
    def test_temperature_bounds_rejected(self, assembler, llm_ready, temperature):
        llm_ready.update(ConfigGroup.LLM, {"temperature": temperature})
        error = violation(assembler, "enable_llm")
        assert error.message == "Temperature must be a number between 0 and 1."

    @pytest.mark.parametrize("max_tokens", ["0", "-5", "1.5", "100abc", "many"])
    def test_max_tokens_rejected(self, assembler, llm_ready, max_tokens):
        llm_ready.update(ConfigGroup.LLM, {"max_tokens": max_tokens})
        assert violation(assembler, "enable_llm").message == "Max Tokens must be a positive number."

    def test_max_tokens_of_one(self, assembler, llm_ready):
        llm_ready.update(ConfigGroup.LLM, {"max_tokens": "1"})
        assert assembler.build("enable_llm").body["max_tokens"] == 1

    def test_required_fields_reported_before_ranges(self, assembler, store):
        store.update(ConfigGroup.LLM, {"temperature": "5"})
        error = violation(assembler, "enable_llm")
        assert error.field == "provider"
        assert error.message == "Please fill in all LLM configuration fields."


class TestApplySelections:

    def test_use_case_required(self, assembler):
        error = violation(assembler, "apply_selections")
        assert error.message == "Please select a use case before saving."

    def test_select_all_filtered_and_names_ordered(self, assembler, store, catalog, dormant_checks, compliance_checks):
        catalog.dormant_checks = dormant_checks
        catalog.compliance_checks = compliance_checks
        store.update(ConfigGroup.ANALYSIS, {
            "selected_use_case": "dormancy",
            "selected_dormant_check_ids": ["b", "all", "a"],
            "selected_compliance_check_ids": ["c2"],
        })

        body = assembler.build("apply_selections").body

        assert body == {
            "use_case": "dormancy",
            "selected_dormant_checks": ["Safe Deposit Dormancy", "Investment Inactivity"],
            "selected_compliance_checks": ["Flag Candidates"],
        }

    def test_unknown_ids_fall_back_to_raw_value(self, assembler, store, catalog):
        catalog.dormant_checks = [make_check("a", name="Known")]
        store.update(ConfigGroup.ANALYSIS, {
            "selected_use_case": "dormancy",
            "selected_dormant_check_ids": ["zz", "a", "yy"],
        })

        body = assembler.build("apply_selections").body

        assert body["selected_dormant_checks"] == ["Known", "yy", "zz"]
        assert body["selected_compliance_checks"] == []


class TestRagCredentials:

    def test_payload(self, assembler, store):
        store.update(ConfigGroup.RAG, {"generation_provider": "OpenAI", "generation_model": "gpt-4"})
        body = assembler.build("save_rag_credentials").body

        assert body["generation_provider"] == "openai"
        assert body["vector_db_type"] == "azurecosmosdb"
        assert body["chunk_size"] == 1000
        assert body["chunk_overlap"] == 200
        assert body["top_k_retrieval"] == 5
        assert body["enabled"] is True
        assert body["blob_prefix"] is None

    def test_generation_model_required(self, assembler, store):
        store.update(ConfigGroup.RAG, {"generation_provider": "openai"})
        assert violation(assembler, "save_rag_credentials").field == "generation_model"


class TestUploadKnowledge:

    def test_file_required(self, assembler):
        error = violation(assembler, "upload_knowledge")
        assert error.field == "selected_file_name"
        assert error.message == "Please select a file to upload."

    def test_multipart_payload(self, assembler, store):
        store.update(ConfigGroup.KNOWLEDGE_BASE, {"extract_metadata": False})
        request = assembler.build("upload_knowledge", file_name="policy.pdf", content=b"%PDF")

        assert request.encoding == "multipart"
        assert request.files == {"file": ("policy.pdf", b"%PDF")}
        assert request.body == {"chunk_size": "1000", "chunk_overlap": "200", "extract_metadata": "false"}

    @pytest.mark.parametrize("chunk_size, overlap, message", [
        ("0", "0", "Chunk Size must be a positive number."),
        ("500", "-1", "Chunk Overlap must be a non-negative number."),
        ("500", "500", "Chunk Overlap must be less than Chunk Size."),
    ])
    def test_chunking_rules(self, assembler, store, chunk_size, overlap, message):
        store.update(ConfigGroup.KNOWLEDGE_BASE, {"chunk_size": chunk_size, "overlap": overlap})
        error = violation(assembler, "upload_knowledge", file_name="policy.pdf", content=b"%PDF")
        assert error.message == message


class TestExecutePrompt:

    def test_prompt_required(self, assembler):
        assert violation(assembler, "execute_prompt").message == "Prompt is a required field."

    def test_placeholder_type_rejected(self, assembler, store):
        store.update(ConfigGroup.PROMPT_GENERATION, {"prompt_input": "Summarise", "prompt_type": "--"})
        assert violation(assembler, "execute_prompt").field == "prompt_type"

    def test_form_payload(self, assembler, store):
        store.update(ConfigGroup.PROMPT_GENERATION, {"prompt_input": "Summarise", "use_rag": True})
        request = assembler.build("execute_prompt")

        assert request.encoding == "form"
        assert request.body == {
            "prompt": "Summarise",
            "type": "general_assistant",
            "use_rag": "true",
            "use_database": "false",
            "show_code": "false",
            "temperature": "0.7",
            "max_tokens": "1000",
        }
