"""Bootstrap records shared by the tests"""

PERSON = "person=Ali,Ahmadi,1234567890,09121234567,Tehran"
ISSUER = "issuer=627353,TejaratBank"
ACCOUNT = "account=1234567890,SAVINGS,1234567890"
CARD = "card=6273531234567890,CREDIT,true,12,1405,627353,1234567890"

# one person with one savings account and one credit card from one bank
SCENARIO_A = [PERSON, ISSUER, ACCOUNT, CARD]
