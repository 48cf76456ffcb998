"""Tests for the service facades."""

import pytest
from lxml import etree

from adwords.core.constants import (
    CM_NAMESPACE,
    RM_NAMESPACE,
    SOAP_ENV_NAMESPACE,
    XSI_NAMESPACE,
)
from adwords.core.exceptions import ConfigurationError, SOAPFault
from adwords.schema.common import Operator, Paging, Selector
from adwords.schema.errors import AuthenticationError, ErrorCategory, classify_fault
from adwords.services import (
    AdGroupCriterionService,
    AdwordsUserListService,
    DraftAsyncErrorService,
    ServiceFacade,
)
from adwords.services import ad_group_criterion as agc
from adwords.services import adwords_user_list as aul
from adwords.services import draft_async_error as dae
from adwords.soap.headers import SoapHeader
from adwords.soap.security import SecurityHeader, build_username_token
from adwords.soap.transport import SOAPTransport


def cm(name):
    return f"{{{CM_NAMESPACE}}}{name}"


def rm(name):
    return f"{{{RM_NAMESPACE}}}{name}"


def _header_and_body(adapter):
    envelope = adapter.sent_envelope()
    header = envelope.find(f"{{{SOAP_ENV_NAMESPACE}}}Header")
    body = envelope.find(f"{{{SOAP_ENV_NAMESPACE}}}Body")
    return header, body[0]


class TestServiceFacade:
    def test_requires_url_or_transport(self):
        with pytest.raises(ConfigurationError):
            AdGroupCriterionService()

    def test_builds_transport_from_url(self):
        service = DraftAsyncErrorService("https://example.test/cm/v201802/DraftAsyncErrorService")

        assert isinstance(service.transport, SOAPTransport)
        assert service.transport.insecure_skip_verify is False

    def test_from_config(self, client_config):
        service = AdGroupCriterionService.from_config(client_config)

        assert service.transport.url == (
            "https://adwords.example.test/api/adwords/cm/v201802/AdGroupCriterionService"
        )
        (header,) = service.transport.headers
        assert isinstance(header, SoapHeader)
        assert header.developer_token == "dev-token-123"
        assert header.validate_only is None

    def test_set_header_is_add_header(self):
        service = AdGroupCriterionService("https://example.test/svc")
        security = build_username_token("user", "pw")

        service.set_header(security)
        service.add_header(security)

        assert service.transport.headers == (security, security)

    def test_shared_transport(self):
        transport = SOAPTransport("https://example.test/svc")

        first = AdGroupCriterionService(transport=transport)
        second = ServiceFacade(transport=transport)

        assert first.transport is second.transport


class TestAdGroupCriterionService:
    @pytest.fixture
    def service(self, client_config):
        return AdGroupCriterionService.from_config(client_config)

    def test_get(self, service, attach, fake_adapter, envelope_bytes):
        adapter = attach(
            service.transport,
            fake_adapter(
                body=envelope_bytes(
                    f'<getResponse xmlns="{CM_NAMESPACE}"><rval>'
                    "<totalNumEntries>0</totalNumEntries></rval></getResponse>"
                )
            ),
        )

        response = service.get(agc.Get(Selector(fields=["Id"], paging=Paging(0, 10))))

        assert isinstance(response, agc.GetResponse)
        assert response.rval.total_num_entries == 0
        assert response.rval.entries == []

        header, request = _header_and_body(adapter)
        assert header[0].tag == cm("RequestHeader")
        assert header[0].findtext(cm("clientCustomerId")) == "123-456-7890"
        assert request.tag == cm("get")
        assert request.find(cm("serviceSelector")).findtext(cm("fields")) == "Id"
        assert adapter.last_request.headers["SOAPAction"] == ""

    def test_mutate_with_partial_failure(self, service, attach, fake_adapter, envelope_bytes):
        adapter = attach(
            service.transport,
            fake_adapter(
                body=envelope_bytes(
                    f'<mutateResponse xmlns="{CM_NAMESPACE}" xmlns:xsi="{XSI_NAMESPACE}"><rval>'
                    '<value xsi:type="BiddableAdGroupCriterion"><adGroupId>42</adGroupId>'
                    '<criterion xsi:type="Keyword"><id>99</id><text>boots</text></criterion>'
                    "</value>"
                    '<partialFailureErrors xsi:type="CriterionError">'
                    "<fieldPath>operations[1].operand.criterion.text</fieldPath>"
                    "<reason>KEYWORD_HAS_INVALID_CHARS</reason>"
                    "</partialFailureErrors>"
                    "</rval></mutateResponse>"
                )
            ),
        )
        operations = [
            agc.AdGroupCriterionOperation(
                operator=Operator.ADD,
                operand=agc.BiddableAdGroupCriterion(
                    ad_group_id=42,
                    criterion=agc.Keyword(text=text, match_type=agc.KeywordMatchType.PHRASE),
                ),
            )
            for text in ("boots", "b@@ts")
        ]

        response = service.mutate(agc.Mutate(operations))

        (value,) = response.rval.value
        assert isinstance(value, agc.BiddableAdGroupCriterion)
        assert value.criterion.id == 99
        (error,) = response.rval.partial_failure_errors
        assert error.kind == "CriterionError"
        assert error.reason == "KEYWORD_HAS_INVALID_CHARS"

        _, request = _header_and_body(adapter)
        assert len(request.findall(cm("operations"))) == 2

    def test_mutate_label(self, service, attach, fake_adapter, envelope_bytes):
        attach(
            service.transport,
            fake_adapter(
                body=envelope_bytes(
                    f'<mutateLabelResponse xmlns="{CM_NAMESPACE}"><rval><value>'
                    "<adGroupId>1</adGroupId><criterionId>2</criterionId><labelId>3</labelId>"
                    "</value></rval></mutateLabelResponse>"
                )
            ),
        )
        operation = agc.AdGroupCriterionLabelOperation(
            operator=Operator.ADD,
            operand=agc.AdGroupCriterionLabel(ad_group_id=1, criterion_id=2, label_id=3),
        )

        response = service.mutate_label(agc.MutateLabel([operation]))

        assert response.rval.value[0].label_id == 3

    def test_fault_propagates(self, service, attach, fake_adapter, envelope_bytes):
        attach(
            service.transport,
            fake_adapter(
                status=500,
                body=envelope_bytes(
                    "<soap:Fault><faultcode>soap:Server</faultcode>"
                    "<faultstring>AuthenticationError.AUTHENTICATION_FAILED</faultstring>"
                    "</soap:Fault>"
                ),
            ),
        )

        with pytest.raises(SOAPFault) as exc_info:
            service.query(agc.Query("SELECT Id"))

        assert str(exc_info.value) == "AuthenticationError.AUTHENTICATION_FAILED"
        assert classify_fault(exc_info.value) is ErrorCategory.AUTHENTICATION
        assert AuthenticationError.xml_type in str(exc_info.value)


class TestAdwordsUserListService:
    @pytest.fixture
    def service(self, client_config):
        return AdwordsUserListService.from_config(client_config)

    def test_endpoint_and_namespaces(self, service, attach, fake_adapter, envelope_bytes):
        adapter = attach(
            service.transport,
            fake_adapter(
                body=envelope_bytes(
                    f'<queryResponse xmlns="{RM_NAMESPACE}" xmlns:xsi="{XSI_NAMESPACE}" '
                    f'xmlns:cm="{CM_NAMESPACE}"><rval>'
                    "<cm:totalNumEntries>1</cm:totalNumEntries>"
                    '<entries xsi:type="CrmBasedUserList">'
                    "<id>555</id><name>Newsletter subscribers</name><status>OPEN</status>"
                    "<size>1200</size><uploadKeyType>CONTACT_INFO</uploadKeyType>"
                    "</entries></rval></queryResponse>"
                )
            ),
        )

        response = service.query(aul.Query("SELECT Id, Name"))

        assert service.transport.url.endswith("/rm/v201802/AdwordsUserListService")
        (entry,) = response.rval.entries
        assert isinstance(entry, aul.CrmBasedUserList)
        assert entry.status is aul.UserListMembershipStatus.OPEN
        assert entry.upload_key_type is aul.CustomerMatchUploadKeyType.CONTACT_INFO
        assert response.rval.total_num_entries == 1

        header, request = _header_and_body(adapter)
        assert header[0].tag == cm("RequestHeader")
        assert request.tag == rm("query")

    def test_mutate(self, service, attach, fake_adapter, envelope_bytes):
        adapter = attach(
            service.transport,
            fake_adapter(
                body=envelope_bytes(
                    f'<mutateResponse xmlns="{RM_NAMESPACE}" xmlns:xsi="{XSI_NAMESPACE}">'
                    '<rval><value xsi:type="CrmBasedUserList"><id>777</id></value></rval>'
                    "</mutateResponse>"
                )
            ),
        )
        operation = aul.UserListOperation(
            operator=Operator.ADD,
            operand=aul.CrmBasedUserList(
                name="Loyalty members",
                membership_life_span=10000,
                upload_key_type=aul.CustomerMatchUploadKeyType.CONTACT_INFO,
            ),
        )

        response = service.mutate(aul.Mutate([operation]))

        assert response.rval.value[0].id == 777
        _, request = _header_and_body(adapter)
        operand = request.find(rm("operations")).find(rm("operand"))
        assert operand.get(f"{{{XSI_NAMESPACE}}}type").split(":")[-1] == "CrmBasedUserList"
        assert operand.findtext(rm("membershipLifeSpan")) == "10000"

    def test_mutate_members(self, service, attach, fake_adapter, envelope_bytes):
        adapter = attach(
            service.transport,
            fake_adapter(
                body=envelope_bytes(
                    f'<mutateMembersResponse xmlns="{RM_NAMESPACE}"><rval>'
                    "<userLists><id>555</id></userLists></rval></mutateMembersResponse>"
                )
            ),
        )
        operand = aul.MutateMembersOperand(
            user_list_id=555,
            members_list=[
                aul.Member(hashed_email="a" * 64),
                aul.Member(
                    address_info=aul.AddressInfo(
                        hashed_first_name="b" * 64, country_code="IT", zip_code="20100"
                    )
                ),
            ],
        )

        response = service.mutate_members(
            aul.MutateMembers([aul.MutateMembersOperation(operator=Operator.ADD, operand=operand)])
        )

        assert response.rval.user_lists[0].id == 555
        _, request = _header_and_body(adapter)
        assert request.tag == rm("mutateMembers")
        operation = request.find(rm("operations"))
        assert operation.findtext(cm("operator")) == "ADD"
        members = operation.find(rm("operand")).findall(rm("membersList"))
        assert len(members) == 2
        assert members[1].find(rm("addressInfo")).findtext(rm("countryCode")) == "IT"

    def test_get(self, service, attach, fake_adapter, envelope_bytes):
        attach(
            service.transport,
            fake_adapter(
                body=envelope_bytes(
                    f'<getResponse xmlns="{RM_NAMESPACE}"><rval><entries>'
                    "<id>1</id><isReadOnly>true</isReadOnly></entries></rval></getResponse>"
                )
            ),
        )

        response = service.get(aul.Get(Selector(fields=["Id", "IsReadOnly"])))

        (entry,) = response.rval.entries
        assert type(entry) is aul.UserList
        assert entry.is_read_only is True


class TestDraftAsyncErrorService:
    def test_get_and_query(self, client_config, attach, fake_adapter, envelope_bytes):
        service = DraftAsyncErrorService.from_config(client_config)
        body = (
            f'<{{name}} xmlns="{CM_NAMESPACE}" xmlns:xsi="{XSI_NAMESPACE}"><rval>'
            "<totalNumEntries>1</totalNumEntries><entries>"
            "<baseCampaignId>10</baseCampaignId><draftId>20</draftId>"
            "<draftCampaignId>30</draftCampaignId>"
            '<asyncError xsi:type="EntityNotFound"><reason>INVALID_ID</reason></asyncError>'
            "</entries></rval></{name}>"
        )

        attach(service.transport, fake_adapter(body=envelope_bytes(body.format(name="getResponse"))))
        got = service.get(dae.Get(Selector(fields=["DraftId"])))

        attach(service.transport, fake_adapter(body=envelope_bytes(body.format(name="queryResponse"))))
        queried = service.query(dae.Query("SELECT DraftId"))

        for response in (got, queried):
            (entry,) = response.rval.entries
            assert entry.draft_id == 20
            assert entry.async_error.kind == "EntityNotFound"
            assert entry.async_error.reason == "INVALID_ID"

    def test_per_call_security_header(self, client_config, attach, fake_adapter, envelope_bytes):
        service = DraftAsyncErrorService.from_config(client_config)
        adapter = attach(
            service.transport,
            fake_adapter(body=envelope_bytes(f'<queryResponse xmlns="{CM_NAMESPACE}"/>')),
        )

        service.query(dae.Query("SELECT DraftId"), headers=[build_username_token("u", "p")])

        header, _ = _header_and_body(adapter)
        assert [etree.QName(item).localname for item in header] == ["RequestHeader", "Security"]
        assert not any(isinstance(item, SecurityHeader) for item in service.transport.headers)
